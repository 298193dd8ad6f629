from .patients import patients_bp
from .tasks import tasks_bp
from .agents import agents_bp

def register_blueprints(app):
    app.register_blueprint(patients_bp)
    app.register_blueprint(tasks_bp)
    app.register_blueprint(agents_bp)
