import logging

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager

# Extensions are created unbound and attached in create_app()

# Row store for content, settings and messages
db = SQLAlchemy()

# Admin session
login_manager = LoginManager()

# Application logger
logger = logging.getLogger("portfolio")
