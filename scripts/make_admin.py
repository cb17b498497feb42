"""Promote an existing account to admin: python scripts/make_admin.py someone@example.com"""
import sys

from storefront.database import db

if len(sys.argv) != 2:
    sys.exit("usage: make_admin.py <email>")

email = sys.argv[1].strip().lower()
updated = db.update_record("users", "email", email, {"is_admin": True})
if not updated:
    sys.exit(f"No user with email {email}")
print(f"{email} is now an admin")
