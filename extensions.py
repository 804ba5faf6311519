# extensions.py
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

db = SQLAlchemy()
migrate = Migrate()

# Bound in create_app; only the login route carries a limit
limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
