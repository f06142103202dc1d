# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--with-default-users]
#   Idempotent bootstrap: creates tables, permissions and role grants.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all employees with role and active status.
# - python -m flask users create --name "Admin" --email admin@ventas.local --password "Ventas123" --role admin
#   Create an employee (prompts if options are omitted).
#
# Permission inspection/repair:
# - python -m flask perms list [--role cashier] [--module sales]
# - python -m flask perms check admin@ventas.local manage_users
# - python -m flask perms grant cashier view_sales
# - python -m flask perms revoke cashier view_sales
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions
#   Delete revoked and expired sessions past the retention window.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Permission, User
from .permissions import ROLE_ORDER
from .services import auth_service, permission_service, session_service
from .services.auth_service import PasswordValidationError


# Default password meets the strength rules; change it after the first sign-in
DEFAULT_PASSWORD = "Ventas123"

DEFAULT_USERS = [
    ("Administrador", "admin@ventas.local", "admin"),
    ("Gerente", "gerente@ventas.local", "manager"),
    ("Empleado", "empleado@ventas.local", "employee"),
    ("Cajero", "cajero@ventas.local", "cashier"),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--with-default-users', is_flag=True, help='Create one account per role')
@with_appcontext
def init_system(with_default_users):
    """
    Initialize the VentasFULL backend.

    Creates:
    - All tables (when not managed by migrations yet)
    - Every permission definition
    - Default role grants (admin, manager, employee, cashier)
    - Optionally one user per role, password "Ventas123"

    Safe to run multiple times (idempotent).
    """
    click.echo("START Initializing VentasFULL...")
    db.create_all()

    click.echo("\nSECURITY Initializing permissions...")
    perm_count = permission_service.initialize_permissions()
    assignment_count = permission_service.assign_default_role_permissions()
    click.echo(f"PASS Created {perm_count} permissions, {assignment_count} role assignments")

    if with_default_users:
        click.echo("\nUSERS Creating default users...")
        for name, email, role in DEFAULT_USERS:
            if db.session.query(User).filter_by(email=email).first():
                click.echo(f"SKIP {email} already exists")
                continue
            auth_service.create_user(name, email, DEFAULT_PASSWORD, role=role)
            click.echo(f"PASS Created {email} ({role})")
        click.echo(f"\nWARN Default password is '{DEFAULT_PASSWORD}'. Change it immediately.")

    click.echo("\nPASS System initialized")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Full name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ROLE_ORDER)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(name, email, password, role):
    """
    Create a new employee.

    Password must meet strength requirements:
    - Minimum 6 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    """
    try:
        user = auth_service.create_user(name, email, password, role=role)
    except PasswordValidationError as e:
        raise click.ClickException(f"Password validation failed: {e}")
    except ValueError as e:
        raise click.ClickException(f"Failed to create user: {e}")

    click.echo(f"PASS Created user: {user.name} ({user.email}) with role '{user.role}'")


@users_group.command('list')
@with_appcontext
def list_users_cli():
    """List all employees with their roles."""
    users = auth_service.list_users()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 90)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<35} {'Active':<8} {'Role'}")
    click.echo("=" * 90)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.name:<25} {user.email:<35} {active_str:<8} {user.role}")

    click.echo("=" * 90 + "\n")


@click.group('perms')
def perms_group():
    """Permission inspection and repair commands."""


@perms_group.command('list')
@click.option('--role', help='Filter by role tag')
@click.option('--module', help='Filter by module')
@with_appcontext
def list_permissions_cli(role, module):
    """List permissions, optionally filtered by role or module."""
    if role:
        if role not in ROLE_ORDER:
            raise click.ClickException(f"Role '{role}' not found")
        perms = permission_service.get_role_permissions(role)
        heading = f"Permissions for role: {role.upper()}"
    else:
        query = db.session.query(Permission)
        if module:
            query = query.filter_by(module=module)
        perms = query.order_by(Permission.module, Permission.name).all()
        heading = f"Permissions in module: {module}" if module else "All Permissions"

    click.echo(f"\n{'=' * 80}")
    click.echo(heading)
    click.echo(f"{'=' * 80}\n")

    click.echo(f"{'Name':<28} {'Module':<16} {'Description'}")
    click.echo("-" * 80)
    for perm in perms:
        click.echo(f"{perm.name:<28} {perm.module:<16} {perm.description or ''}")

    click.echo(f"\n Total: {len(perms)} permissions\n")


@perms_group.command('grant')
@click.argument('role')
@click.argument('permission_name')
@with_appcontext
def grant_permission_cli(role, permission_name):
    """Grant a permission to a role."""
    try:
        permission_service.grant_permission_to_role(role, permission_name)
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Granted '{permission_name}' to role '{role}'")


@perms_group.command('revoke')
@click.argument('role')
@click.argument('permission_name')
@with_appcontext
def revoke_permission_cli(role, permission_name):
    """Revoke a permission from a role."""
    try:
        revoked = permission_service.revoke_permission_from_role(role, permission_name)
    except ValueError as e:
        raise click.ClickException(str(e))

    if revoked:
        click.echo(f"PASS Revoked '{permission_name}' from role '{role}'")
    else:
        click.echo(f"WARN  Permission '{permission_name}' was not granted to '{role}'")


@perms_group.command('check')
@click.argument('email')
@click.argument('permission_name')
@with_appcontext
def check_permission_cli(email, permission_name):
    """Check if an employee has a specific permission."""
    user = db.session.query(User).filter_by(email=auth_service.normalize_email(email)).first()
    if not user:
        raise click.ClickException(f"User '{email}' not found")

    if permission_service.user_has_permission(user.id, permission_name):
        click.echo(f"PASS User '{user.email}' HAS permission '{permission_name}'")
    else:
        click.echo(f"FAIL User '{user.email}' DOES NOT HAVE permission '{permission_name}'")

    click.echo(f"\nUser role: {user.role}")
    click.echo(f"Total permissions: {len(permission_service.get_user_permissions(user.id))}")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@with_appcontext
def cleanup_sessions_cli():
    """Delete expired and revoked sessions older than the retention window."""
    deleted = session_service.cleanup_expired_sessions()
    click.echo(f"Deleted {deleted} sessions.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
    app.cli.add_command(maintenance_group)
