import click
from flask import Flask, g
from flask_cors import CORS
from flask_migrate import Migrate

from config import Config
from routes import health_bp, payments_bp, webhook_bp, pay_pages_bp, users_bp

from models import db
from models.user import User
from security.rate_limit import init_rate_limiter
from utils.membership import promote_to_core
from utils.razorpay_client import init_razorpay

API_CSP = "default-src 'none'; frame-ancestors 'none';"


def _checkout_csp(nonce: str) -> str:
    return (
        "default-src 'self'; "
        f"script-src 'self' 'nonce-{nonce}' https://checkout.razorpay.com; "
        "frame-src https://api.razorpay.com https://checkout.razorpay.com; "
        "connect-src 'self' https://api.razorpay.com https://lumberjack.razorpay.com; "
        "img-src 'self' data: https:; "
        "style-src 'self' 'unsafe-inline'; "
        "frame-ancestors 'none';"
    )


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(webhook_bp)
    app.register_blueprint(pay_pages_bp)
    app.register_blueprint(users_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Browser client is served from another origin
    CORS(app, origins=app.config.get("CORS_ORIGINS", "*"))

    # Gateway client and the advisory checkout limiter
    init_razorpay(app)
    init_rate_limiter(app)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        # Only the checkout page runs scripts, and only the nonce'd one plus Razorpay's
        nonce = getattr(g, "csp_nonce", None)
        resp.headers["Content-Security-Policy"] = _checkout_csp(nonce) if nonce else API_CSP
        return resp

    register_cli(app)

    return app

#-------------------------

def register_cli(app):
    @app.cli.command("make-core")
    @click.argument("email")
    def make_core(email):
        """Grant core membership to an existing user by email."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            click.echo("User not found")
            return

        promote_to_core(user)
        click.echo(f"{user.email} is now a core member")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5000)
