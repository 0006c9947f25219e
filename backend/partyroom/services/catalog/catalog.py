import json
import random

from flask import current_app

from partyroom import db
from partyroom.models import Game, Prompt, new_id, utcnow
from .defaults import DEFAULT_GAMES

_PROMPT_COLUMNS = ('id', 'text', 'difficulty')


def list_games():
    return Game.query.order_by(Game.name.asc()).all()


def get_game(game_id):
    if not game_id:
        return None
    return db.session.get(Game, game_id)


def list_by_category(category):
    return Game.query.filter_by(category=category).order_by(Game.name.asc()).all()


def _prompt_from_dict(data: dict) -> Prompt:
    extra = {k: v for k, v in data.items() if k not in _PROMPT_COLUMNS}
    return Prompt(
        key=data.get('id') or new_id(),
        text=data['text'],
        difficulty=data.get('difficulty') or 'medium',
        extra=json.dumps(extra) if extra else None,
    )


def create_game(data: dict) -> Game:
    game = Game(
        name=data['name'],
        description=data.get('description') or '',
        category=data.get('category'),
        min_players=int(data.get('min_players') or 2),
        max_players=int(data.get('max_players') or 10),
    )
    game.prompts = [_prompt_from_dict(q) for q in data.get('questions') or []]
    db.session.add(game)
    db.session.commit()
    return game


def seed_default_games() -> int:
    """Create missing default games and fill existing ones that have no prompts.

    Returns the number of games created or updated.
    """
    changed = 0
    for default in DEFAULT_GAMES:
        existing = Game.query.filter_by(name=default['name']).first()
        if existing is None:
            create_game(default)
            changed += 1
        elif not existing.prompts:
            existing.prompts = [_prompt_from_dict(q) for q in default['questions']]
            existing.updated_at = utcnow()
            db.session.commit()
            changed += 1
    current_app.logger.info(f"[catalog-seed] {changed} game(s) created or updated")
    return changed


def draw_prompts(game_id, count):
    """Pick up to ``count`` distinct prompts of a game at random."""
    game = get_game(game_id)
    if game is None or not game.prompts:
        return []
    prompts = [p.to_dict() for p in game.prompts]
    return random.sample(prompts, min(count, len(prompts)))
