#!/usr/bin/env python3
"""
Создание администратора. Регистрации через API нет.
"""
import argparse
import getpass
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from photoshare.config.database import create_db_engine, create_session_factory, create_tables
from photoshare.config.settings import get_settings
from photoshare.main import configure_logging
from photoshare.models.database import Admin
from photoshare.services.auth_service import AuthService


def main():
    parser = argparse.ArgumentParser(description="Provision an admin account")
    parser.add_argument("username")
    parser.add_argument("--email", default=None)
    parser.add_argument("--password", default=None, help="prompted for when omitted")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("Password must not be empty")
        sys.exit(1)

    engine = create_db_engine(settings.database_url)
    create_tables(engine)
    db = create_session_factory(engine)()
    try:
        if db.query(Admin).filter(Admin.username == args.username).first():
            print(f"Admin '{args.username}' already exists")
            sys.exit(1)

        auth_service = AuthService(settings.jwt_secret, algorithm=settings.jwt_algorithm)
        admin = auth_service.create_admin(db, args.username, password, email=args.email)
        print(f"Created admin '{admin.username}' (id={admin.id})")
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    main()
