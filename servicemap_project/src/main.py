#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ServiceMap - Service Area Editor

Main entry point: parses the command line, sets up logging, opens the JSON
store and launches the editor window for one company.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .utils.logging_utils import level_from_name, setup_logging


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="servicemap", description="Draw and manage service areas.")
    parser.add_argument("--email", required=True, help="Signed-in user's verified email.")
    parser.add_argument("--company-id", default="default-company", help="Company to edit areas for.")
    parser.add_argument("--company-name", default="My Company", help="Company display name.")
    parser.add_argument("--data-file", default=None, help="JSON store file (defaults to the settings value).")
    parser.add_argument(
        "--add-service",
        action="append",
        default=[],
        metavar="NAME:CATEGORY",
        help="Create a service before opening the editor (repeatable).",
    )
    parser.add_argument("--log-level", default="info", help="debug, info, warning or error.")
    parser.add_argument("--log-file", default=None, help="Optional log file path.")
    return parser.parse_args(argv)


def add_services(gateway, company_id: str, email: str, entries: Sequence[str]) -> bool:
    """Create each ``NAME:CATEGORY`` entry the company does not already offer.

    Returns False as soon as an entry cannot be created.
    """
    from .models.service import ServiceCategory

    logger = logging.getLogger(__name__)
    existing = gateway.list_services(company_id)
    if not existing.ok:
        logger.error("Could not list services for company %s: %s", company_id, existing.error)
        return False
    names = {service.name for service in existing.data}

    for entry in entries:
        name, _, category = entry.partition(":")
        name, category = name.strip(), category.strip()
        if name in names:
            logger.info("Service %r already exists for company %s", name, company_id)
            continue
        if not ServiceCategory.is_valid(category):
            choices = "; ".join(
                f"{group}: {', '.join(c.internal_name for c in members)}"
                for group, members in ServiceCategory.grouped().items()
            )
            logger.error("Service %r needs one of these categories - %s", name, choices)
            return False
        result = gateway.create_service(
            company_id=company_id,
            name=name,
            description=name,
            category=category,
            email=email,
        )
        if not result.ok:
            logger.error("Could not create service %r: %s", name, result.error)
            return False
        names.add(name)
    return True


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point for the ServiceMap application.

    Returns:
        int: Exit code (0 for success)
    """
    args = _parse_args(argv)
    setup_logging(level_from_name(args.log_level), args.log_file)
    logger = logging.getLogger(__name__)
    logger.info("Starting ServiceMap application")

    from PySide6.QtWidgets import QApplication

    from .models.company import Company, User
    from .services.authorization import NotAuthenticatedError
    from .services.gateway import InMemoryGateway
    from .services.session_service import StaticSessionProvider
    from .services.settings_service import SettingsService
    from .ui.main_window import MainWindow

    settings = SettingsService()
    data_file = Path(args.data_file).expanduser() if args.data_file else settings.data_file()
    gateway = InMemoryGateway(data_file)

    if not add_services(gateway, args.company_id, args.email, args.add_service):
        return 2

    app = QApplication(sys.argv[:1])
    app.setApplicationName("ServiceMap")
    app.setOrganizationName("ServiceMap")

    session = StaticSessionProvider(User(id=args.email, email=args.email))
    company = Company(id=args.company_id, company_name=args.company_name, email=args.email)
    try:
        window = MainWindow(gateway, session, company)
    except NotAuthenticatedError as exc:
        logger.error("%s", exc)
        return 1
    window.show()

    exit_code = app.exec()
    logger.info("Application exited with code %s", exit_code)
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
