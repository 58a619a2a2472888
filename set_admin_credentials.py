from app import create_app
from errors import PortfolioError
from modules.auth.credentials import validate_new_password, validate_username


def set_admin_credentials(username=None, password=None, app=None):
    """Same rules as the admin panel, without the current-password check."""
    app = app or create_app({"RESET_SWEEP_ENABLED": False})
    with app.app_context():
        credentials = app.extensions["credentials"]
        try:
            if password:
                validate_new_password(password)
                credentials.set_password(password)
                print("✅ Admin password updated")
            if username:
                previous = credentials.admin_username()
                name = validate_username(username)
                credentials.set_username(name)
                print(f"✅ Admin username changed: {previous} -> {name}")
        except PortfolioError as exc:
            print(f"⚠️  {exc.reason}")
            return False
    return True


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Set the admin username and/or password.')
    parser.add_argument('--username', help='New admin username')
    parser.add_argument('--password', help='New admin password (min 8 characters)')

    args = parser.parse_args()
    if not args.username and not args.password:
        parser.error('nothing to do: pass --username and/or --password')
    set_admin_credentials(args.username, args.password)
