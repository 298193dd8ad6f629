from flask import Blueprint, jsonify

from .helpers import get_agent_service, error_response

agents_bp = Blueprint('agents', __name__, url_prefix='/api/agents')


@agents_bp.route('/', methods=['GET'])
def list_agents():
    return jsonify([a.to_dict() for a in get_agent_service().get_all()])


@agents_bp.route('/ai', methods=['GET'])
def list_ai_agents():
    return jsonify([a.to_dict() for a in get_agent_service().get_ai_agents()])


@agents_bp.route('/staff', methods=['GET'])
def list_staff():
    return jsonify([a.to_dict() for a in get_agent_service().get_staff()])


@agents_bp.route('/<agent_id>', methods=['GET'])
def get_agent(agent_id):
    agent = get_agent_service().get_agent_by_id(agent_id)
    if not agent:
        return error_response('Agent not found', 404)
    return agent.to_dict()
