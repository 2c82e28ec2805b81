import os
import logging

import click
from flask import Flask, jsonify
from werkzeug.security import generate_password_hash

from taskbord.config import config_by_name
from taskbord.errors import AssignmentError
from taskbord.extensions import db, migrate, login_manager, limiter


def create_app(config_name=None):
    """Application factory."""

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        try:
            config_by_name[config_name].validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")

    # --- Init extensions ---
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    # --- Import models so Alembic can discover them ---
    with app.app_context():
        from taskbord import models  # noqa: F401

    # --- Bord context middleware ---
    from taskbord.middleware.bord_context import init_bord_middleware
    init_bord_middleware(app)

    # --- Register blueprints ---
    from taskbord.blueprints.auth import auth_bp
    from taskbord.blueprints.bords import bords_bp
    from taskbord.blueprints.execution import execution_bp
    from taskbord.blueprints.personal import personal_bp
    from taskbord.blueprints.workspaces import workspaces_bp
    from taskbord.blueprints.notifications import notifications_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(bords_bp)
    app.register_blueprint(execution_bp)
    app.register_blueprint(personal_bp)
    app.register_blueprint(workspaces_bp)
    app.register_blueprint(notifications_bp)

    # --- Error handlers ---
    @app.errorhandler(AssignmentError)
    def assignment_error(e):
        # Drops any half-done write and releases the publish lock
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"error": "Bad request"}), 400

    @app.errorhandler(403)
    def forbidden(e):
        return jsonify({"error": "Forbidden"}), 403

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(429)
    def rate_limited(e):
        return jsonify({"error": "Too many requests"}), 429

    @app.errorhandler(500)
    def server_error(e):
        return jsonify({"error": "Internal server error"}), 500

    # --- CLI commands ---
    register_cli(app)

    # --- Security headers ---
    @app.after_request
    def add_security_headers(response):
        """Add security headers to every response."""
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Control referrer information
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # JSON only: nothing to load, nothing to frame
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none';"
        )
        response.headers["Cache-Control"] = "no-store"
        # Strict Transport Security (only in production)
        if not app.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=logging.INFO)

    return app


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    @app.cli.command("create-user")
    @click.option("--email", required=True, help="Login email")
    @click.option("--password", required=True, help="Password (min 8 chars)")
    @click.option("--name", "full_name", default=None, help="Display name")
    def create_user(email, password, full_name):
        """Create a user with a personal workspace.

        Usage:
            flask create-user --email jane@example.com --password s3cret123
        """
        from taskbord.models.user import User
        from taskbord.services import friend_service

        email = email.lower().strip()
        if len(password) < 8:
            click.echo("ERROR: Password must be at least 8 characters.")
            return
        if User.query.filter_by(email=email).first():
            click.echo(f"User already exists: {email}")
            return

        user = User(
            email=email,
            password_hash=generate_password_hash(password),
            full_name=full_name,
        )
        db.session.add(user)
        db.session.flush()
        friend_service.ensure_personal_workspace(user)
        db.session.commit()
        click.echo(f"Created user: {email} (id: {user.id})")

    @app.cli.command("seed-demo")
    @click.option("--password", default="demo12345", help="Password for every demo user")
    def seed_demo(password):
        """Create an owner, two employees, an organization and a linked bord.

        Usage:
            flask seed-demo
            flask seed-demo --password s3cret123
        """
        from taskbord.models.organization import EmployeeMembership, Organization
        from taskbord.models.user import User
        from taskbord.services import bord_service, friend_service

        # --- 1. Users ---
        users = {}
        for key, email, name in [
            ("owner", "owner@taskbord.local", "Olivia Owner"),
            ("alice", "alice@taskbord.local", "Alice Employee"),
            ("bob", "bob@taskbord.local", "Bob Employee"),
        ]:
            user = User.query.filter_by(email=email).first()
            if user is None:
                user = User(
                    email=email,
                    password_hash=generate_password_hash(password),
                    full_name=name,
                )
                db.session.add(user)
                db.session.flush()
            friend_service.ensure_personal_workspace(user)
            users[key] = user

        # --- 2. Organization + memberships ---
        org = Organization.query.filter_by(
            owner_id=users["owner"].id, name="Demo Co"
        ).first()
        if org is None:
            org = Organization(name="Demo Co", owner_id=users["owner"].id)
            db.session.add(org)
            db.session.flush()
        for key in ("alice", "bob"):
            if not EmployeeMembership.query.filter_by(
                organization_id=org.id, user_id=users[key].id
            ).first():
                db.session.add(EmployeeMembership(
                    organization_id=org.id, user_id=users[key].id
                ))

        # --- 3. Bord ---
        bord, _ = bord_service.link_bord(
            users["owner"].id, org.id, "demo-board", "Launch Plan"
        )
        db.session.commit()

        click.echo("")
        click.echo("=" * 60)
        click.echo("Demo data created successfully!")
        click.echo("=" * 60)
        for key, user in users.items():
            click.echo(f"  {key:<6} {user.email} / {password}")
        click.echo(f"  Org:    {org.name} (id: {org.id})")
        click.echo(f"  Bord:   {bord.title} (id: {bord.id})")
        click.echo("=" * 60)

    @app.cli.command("reconcile-bords")
    @click.option("--dry-run", is_flag=True, help="Report without writing.")
    @click.option("--purge-discarded", is_flag=True, help="Hard-delete discarded assignments.")
    def reconcile_bords(dry_run, purge_discarded):
        """Re-derive every bord's publish counter from its snapshots.

        Usage:
            flask reconcile-bords
            flask reconcile-bords --dry-run
            flask reconcile-bords --purge-discarded
        """
        from taskbord.models.bord import Bord
        from taskbord.services import assignment_service, publish_service

        repaired = 0
        for bord in Bord.query.order_by(Bord.created_at).all():
            report = publish_service.reconcile_bord(bord)
            if report["repaired"]:
                repaired += 1
            click.echo(
                f"  {bord.title} ({bord.id}): v{report['latestVersion']}, "
                f"{report['pendingDrafts']} drafts, "
                f"{report['pendingUnassignments']} unassignments pending"
                + ("  [repaired]" if report["repaired"] else "")
            )

        purged = assignment_service.purge_discarded() if purge_discarded else 0

        if dry_run:
            db.session.rollback()
            click.echo(f"Dry run: {repaired} bord(s) would be repaired.")
            if purge_discarded:
                click.echo(f"Dry run: {purged} discarded assignment(s) would be purged.")
        else:
            db.session.commit()
            click.echo(f"Repaired {repaired} bord(s).")
            if purge_discarded:
                click.echo(f"Purged {purged} discarded assignment(s).")
