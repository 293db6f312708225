#!/usr/bin/env python3
"""
Run a script from migrations/ with the project root on PYTHONPATH.
Usage: python run_migration.py <migration_name> [--rollback]
"""

import os
import sys
import subprocess

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
MIGRATIONS_DIR = os.path.join(PROJECT_ROOT, 'migrations')


def available_migrations():
    return sorted(
        name[:-3] for name in os.listdir(MIGRATIONS_DIR)
        if name.endswith('.py') and not name.startswith('_')
    )


def run_migration(migration_name, extra_args=()):
    """Run one migration in a subprocess; returns True on success."""
    env = os.environ.copy()
    env['PYTHONPATH'] = PROJECT_ROOT

    migration_path = os.path.join(MIGRATIONS_DIR, f'{migration_name}.py')
    if not os.path.exists(migration_path):
        print(f"Migration not found: {migration_name}")
        print(f"Available: {', '.join(available_migrations())}")
        return False

    print(f"Running migration: {migration_name} {' '.join(extra_args)}".rstrip())
    result = subprocess.run(
        [sys.executable, migration_path, *extra_args],
        env=env,
        cwd=PROJECT_ROOT
    )

    return result.returncode == 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python run_migration.py <migration_name> [--rollback]")
        print("Example: python run_migration.py add_custom_tasks")
        sys.exit(1)

    success = run_migration(sys.argv[1], sys.argv[2:])
    sys.exit(0 if success else 1)
