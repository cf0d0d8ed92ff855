from flask import Blueprint, request, jsonify, g
from ..app import get_db_connection, release_db_connection, jwt_required, limiter, logger
import uuid
import psycopg2
import psycopg2.extras
from dataclasses import asdict
from liftengine.constants import STORED_LOAD_UNIT
from liftengine.history import (
    complete_session,
    count_logged_sets,
    fetch_exercise_target,
    fetch_logged_set_history,
    fetch_logged_sets,
    fetch_split_progress,
    insert_logged_sets,
    set_current_day,
)
from liftengine.models import LoggedSet, exercise_target_from_row, logged_sets_from_rows
from liftengine.predictions import best_estimate, best_estimate_by_date, estimate_max
from liftengine.recommendation import build_recommendation
from liftengine.session import (
    NoValidSetsError,
    is_exercise_completed,
    next_split_day,
    parse_set_entries,
    rep_range_label,
    working_set_drafts,
)
from liftengine.units import SUPPORTED_UNITS, convert_load

recommendations_bp = Blueprint('recommendations', __name__)


def _parse_session_id(value):
    """Canonical session UUID string; raises ValueError for anything else."""
    return str(uuid.UUID(str(value)))


def _recommendation_payload(target, history):
    """JSON body shared by the read and log endpoints."""
    best = best_estimate(history)
    recommendation = build_recommendation(history, target, best=best)
    return {
        "exercise_id": target.exercise_id,
        "exercise_name": target.name,
        "rep_range": rep_range_label(target),
        "target_effort": target.target_effort,
        "warmup_set_count": target.warmup_set_count,
        "working_set_count": target.working_set_count,
        "best_set": best.to_dict(),
        "recommendation": recommendation.to_dict(),
        "has_recommendation": recommendation.working_set_load is not None,
    }


def _session_progress(target, session_id, logged):
    return {
        "session_id": session_id,
        "logged_sets": logged,
        "completed": is_exercise_completed(target, logged),
    }


@recommendations_bp.route('/v1/predict/1rm/epley', methods=['POST'])
@limiter.limit("60 per hour")
def predict_1rm_epley():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object with 'weight' and 'reps'."}), 400

    return jsonify({
        "weight_input": data.get('weight'),
        "reps_input": data.get('reps'),
        "estimated_max": estimate_max(data.get('weight'), data.get('reps')),
        "units": "same_as_input_weight"
    })


@recommendations_bp.route('/v1/recommendations/preview', methods=['POST'])
@limiter.limit("120 per hour")
def preview_recommendation():
    """Recommendation for ad-hoc history and prescription; no database access."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object."}), 400

    raw_history = data.get('history', [])
    if not isinstance(raw_history, list):
        return jsonify({"error": "'history' must be a list of sets."}), 400

    history = logged_sets_from_rows(raw_history)
    target = exercise_target_from_row(data.get('target'))
    best = best_estimate(history)
    recommendation = build_recommendation(history, target, best=best)

    return jsonify({
        "sets_considered": len(history),
        "sets_ignored": len(raw_history) - len(history),
        "target_valid": target is not None,
        "best_set": best.to_dict(),
        "recommendation": recommendation.to_dict(),
        "has_recommendation": recommendation.working_set_load is not None,
    })


@recommendations_bp.route('/v1/exercises/<uuid:exercise_id>/recommendation', methods=['GET'])
@jwt_required
def get_exercise_recommendation(exercise_id):
    user_id = g.current_user_id
    session_id = request.args.get('session_id')
    if session_id:
        try:
            session_id = _parse_session_id(session_id)
        except ValueError:
            return jsonify(error="'session_id' must be a UUID."), 400

    conn = None
    try:
        conn = get_db_connection()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            target = fetch_exercise_target(cur, exercise_id)
            if target is None:
                return jsonify(error="Exercise not found."), 404

            history = fetch_logged_sets(cur, user_id, exercise_id)
            payload = _recommendation_payload(target, history)
            payload["drafts"] = [asdict(d) for d in working_set_drafts(target)]

            if session_id:
                logged = count_logged_sets(cur, user_id, exercise_id, session_id)
                payload["session"] = _session_progress(target, session_id, logged)

        if payload["has_recommendation"]:
            logger.info(f"User {user_id}, Ex {exercise_id}: recommending {payload['recommendation']['working_set_load']} "
                        f"x {payload['recommendation']['reps_target']} (e1RM {payload['recommendation']['estimated_max']:.1f}).")
        else:
            logger.info(f"User {user_id}, Ex {exercise_id}: not enough information to recommend a working set.")
        return jsonify(payload), 200

    except psycopg2.Error as e:
        logger.error(f"Database error building recommendation for user {user_id}, exercise {exercise_id}: {e}", exc_info=True)
        return jsonify(error="Could not build recommendation due to a database error."), 500
    finally:
        if conn:
            release_db_connection(conn)


@recommendations_bp.route('/v1/exercises/<uuid:exercise_id>/sets', methods=['POST'])
@jwt_required
def log_exercise_sets(exercise_id):
    user_id = g.current_user_id
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get('sets'), list):
        return jsonify(error="Request body must contain a 'sets' list."), 400

    try:
        entries = parse_set_entries(data['sets'])
    except NoValidSetsError as e:
        return jsonify(error=str(e)), 400

    session_id = data.get('session_id')
    if session_id:
        try:
            session_id = _parse_session_id(session_id)
        except ValueError:
            return jsonify(error="'session_id' must be a UUID."), 400

    conn = None
    try:
        conn = get_db_connection()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            target = fetch_exercise_target(cur, exercise_id)
            if target is None:
                return jsonify(error="Exercise not found."), 404

            # Nothing reads from the cursor after commit
            history = fetch_logged_sets(cur, user_id, exercise_id)
            logged_before = count_logged_sets(cur, user_id, exercise_id, session_id) if session_id else 0

            written = insert_logged_sets(cur, user_id, exercise_id, entries, session_id=session_id)
            conn.commit()
        logger.info(f"User {user_id}, Ex {exercise_id}: logged {written} sets.")

        history = history + [LoggedSet(weight=e.weight, reps=e.reps) for e in entries]
        payload = _recommendation_payload(target, history)
        payload["logged"] = [asdict(e) for e in entries]
        if session_id:
            payload["session"] = _session_progress(target, session_id, logged_before + written)

        return jsonify(payload), 201

    except psycopg2.Error as e:
        if conn:
            conn.rollback()
        logger.error(f"Database error logging sets for user {user_id}, exercise {exercise_id}: {e}", exc_info=True)
        return jsonify(error="Could not log sets due to a database error."), 500
    finally:
        if conn:
            release_db_connection(conn)


@recommendations_bp.route('/v1/exercises/<uuid:exercise_id>/e1rm-history', methods=['GET'])
@jwt_required
def get_e1rm_history(exercise_id):
    """Best estimated max per training day, oldest first, for progress charts."""
    user_id = g.current_user_id
    unit = request.args.get('unit', STORED_LOAD_UNIT)
    if unit not in SUPPORTED_UNITS:
        return jsonify(error=f"'unit' must be one of: {', '.join(SUPPORTED_UNITS)}."), 400

    conn = None
    try:
        conn = get_db_connection()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            sets = fetch_logged_set_history(cur, user_id, exercise_id)

        points = []
        for day, best in best_estimate_by_date(sets):
            points.append({
                "date": day.isoformat(),
                "estimated_max": convert_load(best.estimated_max, STORED_LOAD_UNIT, unit),
                "source_weight": convert_load(best.source_weight, STORED_LOAD_UNIT, unit),
                "source_reps": best.source_reps,
            })
        return jsonify({"exercise_id": str(exercise_id), "unit": unit, "points": points}), 200

    except psycopg2.Error as e:
        logger.error(f"Database error reading e1RM history for user {user_id}, exercise {exercise_id}: {e}", exc_info=True)
        return jsonify(error="Could not load progress due to a database error."), 500
    finally:
        if conn:
            release_db_connection(conn)


@recommendations_bp.route('/v1/sessions/<uuid:session_id>/finish', methods=['POST'])
@jwt_required
def finish_session(session_id):
    """Close the workout session and advance the user to the next day of their split."""
    user_id = g.current_user_id

    conn = None
    try:
        conn = get_db_connection()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            if not complete_session(cur, user_id, session_id):
                conn.rollback()
                return jsonify(error="Open session not found."), 404

            next_day = None
            progress = fetch_split_progress(cur, user_id)
            if progress:
                next_day = next_split_day(progress.get('current_day'), progress.get('days_per_week'),
                                          progress.get('day_count') or 0)
                set_current_day(cur, user_id, next_day)
            conn.commit()

        logger.info(f"User {user_id} finished session {session_id}; next split day {next_day}.")
        return jsonify({"session_id": str(session_id), "completed": True, "current_day": next_day}), 200

    except psycopg2.Error as e:
        if conn:
            conn.rollback()
        logger.error(f"Database error finishing session {session_id} for user {user_id}: {e}", exc_info=True)
        return jsonify(error="Could not finish session due to a database error."), 500
    finally:
        if conn:
            release_db_connection(conn)
