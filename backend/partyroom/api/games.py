from flask import Blueprint, jsonify

from partyroom.errors import GameNotFound
from partyroom.services.catalog import catalog

games = Blueprint('games', __name__)


@games.route('', methods=['GET'])
def list_games():
    found = catalog.list_games()
    return jsonify({'success': True, 'games': [g.to_dict(include_prompts=False) for g in found]})


@games.route('/<string:game_id>', methods=['GET'])
def get_game(game_id):
    game = catalog.get_game(game_id)
    if game is None:
        raise GameNotFound()
    return jsonify({'success': True, 'game': game.to_dict()})


@games.route('/category/<string:category>', methods=['GET'])
def games_by_category(category):
    found = catalog.list_by_category(category)
    return jsonify({'success': True, 'games': [g.to_dict(include_prompts=False) for g in found]})
