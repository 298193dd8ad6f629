import logging

from flask import Flask
from flask_migrate import Migrate

from config import Config
from models import db
from routes import register_blueprints

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    Migrate(app, db)

    # Register blueprints
    register_blueprints(app)

    @app.errorhandler(404)
    def not_found(error):
        return {'error': 'Not found'}, 404

    @app.errorhandler(413)
    def file_too_large(error):
        return {'error': 'File too large'}, 413

    return app


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    app = create_app()
    with app.app_context():
        db.create_all()
    app.run(host='0.0.0.0', port=5005, debug=True)
