from flask import current_app, jsonify
from sitebuilder.domain.exceptions import (
    InvariantViolation,
    LoadFailure,
    SaveFieldFailure,
    TenantNotFound,
    TenantUnresolved,
)


def register_error_handlers(app):
    @app.errorhandler(TenantNotFound)
    def handle_tenant_not_found(error):
        # Inactive sites render exactly like missing ones
        response = jsonify({
            "error": "NoSuchSite",
            "message": "No such site",
        })
        response.status_code = 404
        return response

    @app.errorhandler(LoadFailure)
    def handle_load_failure(error):
        current_app.logger.error(f"Site load failed: {error}")
        response = jsonify({
            "error": "LoadFailure",
            "message": str(error)
        })
        response.status_code = 503
        return response

    @app.errorhandler(TenantUnresolved)
    def handle_tenant_unresolved(error):
        response = jsonify({
            "error": "TenantUnresolved",
            "message": str(error)
        })
        response.status_code = 400
        return response

    @app.errorhandler(SaveFieldFailure)
    def handle_save_failure(error):
        response = jsonify({
            "error": "SaveFieldFailure",
            "message": str(error),
            "fields": [failure.to_dict() for failure in error.failures],
        })
        response.status_code = 422
        return response

    @app.errorhandler(InvariantViolation)
    def handle_invariant_violation(error):
        response = jsonify({
            "error": "InvariantViolation",
            "message": str(error)
        })
        response.status_code = 400
        return response
