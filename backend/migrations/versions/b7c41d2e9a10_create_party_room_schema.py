"""create party room schema: user, game, prompt, room, room_player, vote, answer, friendship

Revision ID: b7c41d2e9a10
Revises:
Create Date: 2025-10-02 11:20:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'b7c41d2e9a10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.String(length=128), primary_key=True),
            sa.Column('email', sa.String(length=255), nullable=True),
            sa.Column('username', sa.String(length=64), nullable=True),
            sa.Column('display_name', sa.String(length=128), nullable=False, server_default=''),
            sa.Column('photo_url', sa.String(length=512), nullable=False, server_default=''),
            sa.Column('about', sa.Text(), nullable=False, server_default=''),
            sa.Column('password_hash', sa.String(length=256), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_user_email', 'user', ['email'], unique=True)
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'game' not in existing_tables:
        op.create_table(
            'game',
            sa.Column('id', sa.String(length=64), primary_key=True),
            sa.Column('name', sa.String(length=128), nullable=False),
            sa.Column('description', sa.Text(), nullable=False, server_default=''),
            sa.Column('category', sa.String(length=64), nullable=True),
            sa.Column('min_players', sa.Integer(), nullable=False, server_default='2'),
            sa.Column('max_players', sa.Integer(), nullable=False, server_default='10'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_game_name', 'game', ['name'])
        op.create_index('ix_game_category', 'game', ['category'])

    if 'prompt' not in existing_tables:
        op.create_table(
            'prompt',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.String(length=64), sa.ForeignKey('game.id'), nullable=False),
            sa.Column('key', sa.String(length=64), nullable=False),
            sa.Column('text', sa.Text(), nullable=False),
            sa.Column('difficulty', sa.String(length=16), nullable=False, server_default='medium'),
            sa.Column('extra', sa.Text(), nullable=True),
            sa.UniqueConstraint('game_id', 'key', name='uq_prompt_game_key'),
        )
        op.create_index('ix_prompt_game_id', 'prompt', ['game_id'])

    if 'room' not in existing_tables:
        op.create_table(
            'room',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('code', sa.String(length=6), nullable=False),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('host_id', sa.String(length=128), nullable=False),
            sa.Column('host_name', sa.String(length=128), nullable=False, server_default=''),
            sa.Column('game_id', sa.String(length=64), nullable=True),
            sa.Column('game_name', sa.String(length=128), nullable=True),
            sa.Column('max_players', sa.Integer(), nullable=False, server_default='10'),
            sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
            sa.Column('questions', sa.Text(), nullable=True),
            sa.Column('current_question', sa.Text(), nullable=True),
            sa.Column('current_player_turn', sa.String(length=128), nullable=True),
            sa.Column('round', sa.Integer(), nullable=True),
            sa.Column('selected_friends', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_room_code', 'room', ['code'])
        op.create_index('ix_room_status', 'room', ['status'])
        op.create_index('ix_room_updated_at', 'room', ['updated_at'])

    if 'room_player' not in existing_tables:
        op.create_table(
            'room_player',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('room_id', sa.String(length=36), sa.ForeignKey('room.id'), nullable=False),
            sa.Column('user_id', sa.String(length=128), nullable=False),
            sa.Column('username', sa.String(length=128), nullable=False, server_default=''),
            sa.Column('avatar', sa.String(length=512), nullable=False, server_default=''),
            sa.Column('is_host', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('joined_at', sa.DateTime(), nullable=False),
            sa.Column('left_at', sa.DateTime(), nullable=True),
            sa.Column('rejoined_at', sa.DateTime(), nullable=True),
            sa.UniqueConstraint('room_id', 'user_id', name='uq_room_player_room_user'),
        )
        op.create_index('ix_room_player_room_id', 'room_player', ['room_id'])
        op.create_index('ix_room_player_user_id', 'room_player', ['user_id'])

    if 'vote' not in existing_tables:
        op.create_table(
            'vote',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('room_id', sa.String(length=36), sa.ForeignKey('room.id'), nullable=False),
            sa.Column('question_id', sa.String(length=64), nullable=False),
            sa.Column('user_id', sa.String(length=128), nullable=False),
            sa.Column('username', sa.String(length=128), nullable=False, server_default=''),
            sa.Column('cast_at', sa.DateTime(), nullable=False),
            sa.UniqueConstraint('room_id', 'user_id', name='uq_vote_room_user'),
        )
        op.create_index('ix_vote_room_id', 'vote', ['room_id'])

    if 'answer' not in existing_tables:
        op.create_table(
            'answer',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('room_id', sa.String(length=36), sa.ForeignKey('room.id'), nullable=False),
            sa.Column('user_id', sa.String(length=128), nullable=False),
            sa.Column('question_id', sa.String(length=64), nullable=True),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('shared', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('submitted_at', sa.DateTime(), nullable=False),
            sa.UniqueConstraint('room_id', 'user_id', name='uq_answer_room_user'),
        )
        op.create_index('ix_answer_room_id', 'answer', ['room_id'])

    if 'friendship' not in existing_tables:
        op.create_table(
            'friendship',
            sa.Column('id', sa.String(length=36), primary_key=True),
            sa.Column('user_low', sa.String(length=128), nullable=False),
            sa.Column('user_high', sa.String(length=128), nullable=False),
            sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
            sa.Column('requested_by', sa.String(length=128), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.UniqueConstraint('user_low', 'user_high', name='uq_friendship_pair'),
        )
        op.create_index('ix_friendship_user_low', 'friendship', ['user_low'])
        op.create_index('ix_friendship_user_high', 'friendship', ['user_high'])


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    # Children first
    for table in ('friendship', 'answer', 'vote', 'room_player', 'room', 'prompt', 'game', 'user'):
        if table in existing_tables:
            op.drop_table(table)
