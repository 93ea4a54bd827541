"""
LeaderDojo
SQLAlchemy models package.

The shared ``db`` handle lives here so models, repositories and the app
factory import it from one place:

    from leaderdojo.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
