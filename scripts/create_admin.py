#!/usr/bin/env python3
from __future__ import annotations
import os, sys

# Ensure project root (where 'hifz/' lives) is on sys.path
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from hifz import create_app
from hifz.extensions import db
from hifz.models import User
from hifz.utils.levels import ROLES

def main() -> None:
    username = os.environ.get("ADMIN_USER", "admin").strip()
    password = os.environ.get("ADMIN_PASS", "admin123")
    role     = (os.environ.get("ADMIN_ROLE", "admin") or "admin").strip()

    if role not in ROLES:
        raise SystemExit(f"Invalid ADMIN_ROLE={role!r}; must be one of {'|'.join(ROLES)}")

    app = create_app()
    with app.app_context():
        u = User.query.filter_by(username=username).first()
        if u:
            changed = False
            # update role if different
            if u.role != role:
                u.role = role
                changed = True
            # update password only if explicitly provided (non-empty env)
            if os.environ.get("ADMIN_PASS") is not None and password:
                u.set_password(password)
                changed = True

            if changed:
                db.session.commit()
                print(f"User '{username}' updated (role={u.role}).")
            else:
                print(f"User '{username}' already exists (role={u.role}); no changes.")
        else:
            u = User(username=username, role=role)
            u.set_password(password)
            db.session.add(u)
            db.session.commit()
            print(f"User '{username}' created with role '{role}'.")

if __name__ == "__main__":
    main()
