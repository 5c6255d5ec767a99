#!/usr/bin/env python
"""
Script to grant or inspect the admin role directly in the database

Usage:
    python manage_admins.py add <user_id> [--email EMAIL]
    python manage_admins.py remove <user_id>
    python manage_admins.py check <user_id>
"""
import argparse
import sys

from bakery.constants import ROLE_ADMIN, ROLE_CUSTOMER
from bakery.database import SessionLocal, init_db
from bakery.repositories.profile_repository import ProfileRepository


def set_role(repository: ProfileRepository, user_id: str, role: str, email: str = None) -> int:
    profile = repository.get_by_id(user_id)
    if profile is None:
        repository.create({'id': user_id, 'email': email, 'role': role})
        print(f"✓ Profile created for {user_id} with role '{role}'")
    else:
        repository.set_role(user_id, role)
        print(f"✓ Role for {user_id} set to '{role}'")
    return 0


def check(repository: ProfileRepository, user_id: str) -> int:
    profile = repository.get_by_id(user_id)
    if profile is None:
        print(f"✗ No profile for {user_id}")
        return 1
    print(f"User: {profile.id}")
    print(f"Email: {profile.email or '-'}")
    print(f"Role: {profile.role}")
    return 0 if profile.role == ROLE_ADMIN else 2


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Manage bakery admin accounts")
    commands = parser.add_subparsers(dest="command", required=True)
    
    add = commands.add_parser("add", help="Grant the admin role")
    add.add_argument("user_id")
    add.add_argument("--email")
    
    remove = commands.add_parser("remove", help="Revoke the admin role")
    remove.add_argument("user_id")
    
    inspect = commands.add_parser("check", help="Show a profile's role")
    inspect.add_argument("user_id")
    
    args = parser.parse_args(argv)
    
    init_db()
    db = SessionLocal()
    try:
        repository = ProfileRepository(db)
        if args.command == "add":
            return set_role(repository, args.user_id, ROLE_ADMIN, args.email)
        if args.command == "remove":
            return set_role(repository, args.user_id, ROLE_CUSTOMER)
        return check(repository, args.user_id)
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
