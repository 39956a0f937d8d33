"""
Blueprint registration for ProTimer.

All blueprints carry their full paths (``/api/...``) and are registered
without URL prefixes.
"""

from __future__ import annotations


def register_blueprints(app):
    from blueprints.core import bp as core_bp
    from blueprints.guest import bp as guest_bp
    from blueprints.tasks import bp as tasks_bp
    from blueprints.habits import bp as habits_bp
    from blueprints.flashcards import bp as flashcards_bp
    from blueprints.meetings import bp as meetings_bp
    from blueprints.study_sessions import bp as study_sessions_bp
    from blueprints.study_groups import bp as study_groups_bp

    app.register_blueprint(core_bp)
    app.register_blueprint(guest_bp)
    app.register_blueprint(tasks_bp)
    app.register_blueprint(habits_bp)
    app.register_blueprint(flashcards_bp)
    app.register_blueprint(meetings_bp)
    app.register_blueprint(study_sessions_bp)
    app.register_blueprint(study_groups_bp)
