#!/usr/bin/env python3
"""
Demo User Seeding Script
Creates the demo farmer, business and ESG expert accounts with consistent credentials
"""


import sys
import os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from agroconnect import create_app, seed_demo_users_if_needed, DEMO_PASSWORD, DEMO_USERS
from agroconnect.config import Config


def seed_demo_users(config_class=Config):
    # Seeding happens below, never inside create_app
    class SeedConfig(config_class):
        SEED_DEMO_USERS = False

    app = create_app(SeedConfig)

    with app.app_context():
        result = seed_demo_users_if_needed(app)

    if not result['created']:
        print("Demo users already exist. Skipping seeding.")
        return result

    print("Demo users created successfully!\n")
    print("=" * 60)
    print("DEMO LOGIN CREDENTIALS")
    print("=" * 60)
    print(f"Password for all users: {DEMO_PASSWORD}\n")

    for user_data in DEMO_USERS:
        if user_data['email'] not in result['created']:
            continue
        role = user_data['role'].replace('_', ' ').title()
        print(f"{role}")
        print(f"   Email: {user_data['email']}")
        print(f"   Password: {DEMO_PASSWORD}\n")

    print("=" * 60)
    return result


if __name__ == '__main__':
    seed_demo_users()
