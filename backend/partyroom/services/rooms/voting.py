from typing import NamedTuple, Optional

from flask import current_app

from partyroom.errors import InvalidAnswer, InvalidVoter, QuestionNotOffered, RoomNotActive, WrongTurn
from partyroom.models import Answer, Room, Vote, utcnow
from partyroom.services.live.broadcast import emit_to_room
from . import store
from .lifecycle import require_member
from .scheduler import schedule_turn_rotation

ANSWER_MAX_LEN = 1000


class VoteTally(NamedTuple):
    vote_counts: dict
    votes: dict
    voting_complete: bool
    winning_question: Optional[dict]


def tally_votes(room: Room) -> VoteTally:
    """Count votes for the current turn and pick the winner once everyone voted.

    Voting is complete when the number of votes reaches the number of active
    players other than the turn-holder. Ties go to the prompt offered first.
    """
    votes = room.votes_by_question()
    counts = {qid: len(voters) for qid, voters in votes.items()}
    eligible = [p for p in room.active_players if p.user_id != room.current_player_turn]
    complete = sum(counts.values()) >= len(eligible)

    winner = None
    if complete and counts:
        best_id, best = None, 0
        for qid, count in counts.items():
            if count > best:
                best_id, best = qid, count
        winner = next((q for q in room.offered_questions if q['id'] == best_id), None)
    return VoteTally(counts, votes, complete, winner)


def submit_vote(room_id, user, question_id):
    """Record ``user``'s vote for one of the offered prompts.

    A user holds at most one vote per turn; voting again moves the existing
    vote to the new prompt.
    """
    with store.locked_room(room_id) as (room, _slot):
        if room.status != 'active':
            raise RoomNotActive()
        require_member(room, user.id, active=True)
        if room.current_player_turn == user.id:
            raise InvalidVoter()
        if question_id not in {q['id'] for q in room.offered_questions}:
            raise QuestionNotOffered()

        existing = next((v for v in room.votes if v.user_id == user.id), None)
        if existing is not None:
            existing.question_id = question_id
            existing.cast_at = utcnow()
        else:
            room.votes.append(Vote(question_id=question_id, user_id=user.id, username=user.public_name))
        store.save_room(room)

        tally = tally_votes(room)
        if tally.voting_complete and tally.winning_question:
            room.question = tally.winning_question
            store.save_room(room)

        current_app.logger.info(
            f"[vote] room={room.id} user={user.id} question={question_id} complete={tally.voting_complete}"
        )
        emit_to_room(room.id, 'vote_update', {
            'vote_counts': tally.vote_counts,
            'votes': tally.votes,
            'voting_complete': tally.voting_complete,
            'winning_question': tally.winning_question,
        })
        if tally.voting_complete and tally.winning_question:
            emit_to_room(room.id, 'question_selected', {
                'question': tally.winning_question,
                'countdown': int(current_app.config.get('QUESTION_COUNTDOWN_SEC', 60)),
            })
        return room, tally


def _check_answer(room, user, answer_text):
    if room.status != 'active':
        raise RoomNotActive()
    require_member(room, user.id, active=True)
    if room.current_player_turn != user.id:
        raise WrongTurn()
    text = (answer_text or '').strip() if isinstance(answer_text, str) else ''
    if not 1 <= len(text) <= ANSWER_MAX_LEN:
        raise InvalidAnswer()
    return text


def _record_answer(room, user_id, text, question_id, shared):
    answer = next((a for a in room.answers if a.user_id == user_id), None)
    if answer is None:
        answer = Answer(user_id=user_id)
        room.answers.append(answer)
    answer.content = text
    answer.question_id = question_id
    answer.shared = shared
    answer.submitted_at = utcnow()
    return answer


def submit_answer(room_id, user, answer_text, question_id=None):
    """Record the turn-holder's answer and start the viewing window.

    The turn rotates ``ANSWER_GRACE_SEC`` later; a newer answer restarts the
    window.
    """
    app = current_app._get_current_object()
    grace = int(app.config.get('ANSWER_GRACE_SEC', 20))
    with store.locked_room(room_id) as (room, slot):
        text = _check_answer(room, user, answer_text)
        if question_id is None and room.question:
            question_id = room.question.get('id')
        answer = _record_answer(room, user.id, text, question_id, shared=False)
        store.save_room(room)

        started = answer.submitted_at.isoformat()
        current_app.logger.info(f"[answer] room={room.id} user={user.id} question={question_id}")
        emit_to_room(room.id, 'answer_submitted', {
            'user_id': user.id,
            'username': user.public_name,
            'answer': text,
            'question_id': question_id,
            'player_turn': room.current_player_turn,
            'countdown_start': started,
        })
        emit_to_room(room.id, 'viewer_countdown_start', {'duration': grace, 'start_time': started})
        schedule_turn_rotation(app, room.id, slot)
        return room


def share_answer(room_id, user, answer_text):
    """Show the turn-holder's answer to the room without starting a rotation."""
    with store.locked_room(room_id) as (room, _slot):
        text = _check_answer(room, user, answer_text)
        question_id = room.question.get('id') if room.question else None
        answer = _record_answer(room, user.id, text, question_id, shared=True)
        store.save_room(room)

        current_app.logger.info(f"[answer-share] room={room.id} user={user.id}")
        emit_to_room(room.id, 'answer_shared', {
            'user_id': user.id,
            'username': user.public_name,
            'answer': text,
            'timestamp': answer.submitted_at.isoformat(),
        })
        return room
