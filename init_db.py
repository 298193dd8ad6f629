import logging

from app import create_app
from models import db, Agent
from services.agent_service import AgentService

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def init_db():
    app = create_app()
    with app.app_context():
        # Create all tables
        db.create_all()

        service = AgentService(db.session, default_agent_id=app.config['DEFAULT_AGENT_ID'])
        try:
            added = service.seed_default_agents()
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error seeding agents: {str(e)}")
            raise

        if added:
            logger.info(f"Added {added} default agents")
        else:
            logger.info("Agents already exist in database!")

        if service.get_agent_by_id(app.config['DEFAULT_AGENT_ID']) is None:
            logger.warning(f"Default agent {app.config['DEFAULT_AGENT_ID']} is not seeded; imported tasks will reference a missing agent")

        # Verify agents were added
        for agent in Agent.query.order_by(Agent.type, Agent.name).all():
            logger.info(f"{agent.id}: {agent.name} ({agent.type}, {agent.role})")


if __name__ == '__main__':
    init_db()
