# services/agent_service.py
"""
Agent directory: AI voice agents and staff members that own tasks.
"""

import logging
from typing import List, Optional

from models import Agent

logger = logging.getLogger(__name__)

DEFAULT_AGENTS = [
    # AI agents
    {"id": "ai-luna", "name": "Luna", "type": "ai", "role": "Appointment Confirmation", "avatar": "🤖"},
    {"id": "ai-max", "name": "Max", "type": "ai", "role": "No-Show Follow Up", "avatar": "🤖"},
    {"id": "ai-nova", "name": "Nova", "type": "ai", "role": "Pre-Visit Preparation", "avatar": "🤖"},
    {"id": "ai-maggi", "name": "Maggi", "type": "ai", "role": "Post-Visit Follow Up", "avatar": "🤖"},
    {"id": "ai-aria", "name": "Aria", "type": "ai", "role": "Annual Recall", "avatar": "🤖"},

    # Staff
    {"id": "sarah", "name": "Sarah Chen", "type": "staff", "role": "Front Office Manager", "avatar": "SC"},
    {"id": "mike", "name": "Mike Rodriguez", "type": "staff", "role": "Patient Coordinator", "avatar": "MR"},
    {"id": "jennifer", "name": "Jennifer Williams", "type": "staff", "role": "Billing Specialist", "avatar": "JW"},
]


class AgentService:

    def __init__(self, session, default_agent_id: str = 'ai-maggi'):
        self.session = session
        self.default_agent_id = default_agent_id

    def get_all(self) -> List[Agent]:
        return self.session.query(Agent).order_by(Agent.name.asc()).all()

    def get_ai_agents(self) -> List[Agent]:
        return self.session.query(Agent).filter_by(type='ai').order_by(Agent.name.asc()).all()

    def get_staff(self) -> List[Agent]:
        return self.session.query(Agent).filter_by(type='staff').order_by(Agent.name.asc()).all()

    def get_agent_by_id(self, agent_id: str) -> Optional[Agent]:
        return self.session.get(Agent, agent_id)

    def resolve_agent_id(self, requested: Optional[str]) -> str:
        """
        Map a free-text agent reference to an agent id.

        Tries an exact id match, then a case-insensitive match on the
        name or id of any AI agent, and falls back to the default agent.
        """
        requested = (requested or '').strip()
        if not requested:
            return self.default_agent_id

        agent = self.get_agent_by_id(requested)
        if agent is not None:
            return agent.id

        wanted = requested.lower()
        for agent in self.get_ai_agents():
            if agent.name.lower() == wanted or agent.id.lower() == wanted:
                return agent.id

        logger.info(f"No agent matches '{requested}', using {self.default_agent_id}")
        return self.default_agent_id

    def seed_default_agents(self) -> int:
        """Insert any default agents that are missing. Returns the number added."""
        added = 0
        for agent_data in DEFAULT_AGENTS:
            if self.get_agent_by_id(agent_data['id']) is None:
                self.session.add(Agent(**agent_data))
                added += 1
        if added:
            self.session.commit()
        return added
