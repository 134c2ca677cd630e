from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os
import logging
from datetime import datetime, timezone
from config import get_config
from services.route_calculation_service import RouteCalculationService
from services.route_models import RiskArea, RouteOptions, SafeRoute
from services.route_selection import select_best_route
from services.routing_errors import ConfigError, InputError
from utils.secure_logging import format_point

app_config = get_config()

logging.basicConfig(level=getattr(logging, app_config.LOG_LEVEL, logging.INFO))

app = Flask(__name__)
app.config.from_object(app_config)
logger = logging.getLogger(__name__)

# Route requests carry at most a handful of risk areas; 1 MB is plenty
app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024

# CORS Configuration - origins come from CORS_ORIGINS
ALLOWED_ORIGINS = [origin.strip() for origin in app_config.CORS_ORIGINS if origin.strip()]
CORS(app, origins=ALLOWED_ORIGINS, supports_credentials=True)


@app.after_request
def set_security_headers(response):
    """
    Add security headers to all responses.

    The API only serves JSON, so framing and MIME sniffing are disabled outright.
    """
    if os.getenv('FLASK_ENV') == 'production':
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

    return response


# Rate Limiting Configuration
# Set REDIS_URL to share limits across multiple servers
limiter = Limiter(
    app=app,
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"],
    storage_uri=app_config.RATE_LIMIT_STORAGE_URI,
    enabled=app_config.RATE_LIMIT_ENABLED
)

# Built on first use so a missing Mapbox token only affects routing endpoints
route_service = None


def get_route_service() -> RouteCalculationService:
    """
    Return the shared RouteCalculationService, creating it on first use.

    Raises:
        ConfigError: If the Mapbox token or base URL is not configured
    """
    global route_service
    if route_service is None:
        route_service = RouteCalculationService()
        logger.info("Route calculation service initialized")
    return route_service


def _parse_risk_areas(data):
    risk_areas = data.get('riskAreas', data.get('risk_areas', [])) or []
    if not isinstance(risk_areas, list):
        raise InputError(InputError.INVALID_PAYLOAD, 'riskAreas must be a list')
    return [RiskArea.from_dict(area) for area in risk_areas]


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({'status': 'healthy', 'service': 'risk-routing-api'})


@app.route('/api/routes/calculate', methods=['POST'])
@limiter.limit("40 per hour")  # Each calculation costs up to four provider requests
@limiter.limit("10 per minute")  # Allow recalculation when risk areas change
def calculate_routes():
    """
    Calculate risk-aware routes from start to destination.

    Request Body:
        start (dict): {"lat": float, "lon": float, "name": str?}
        destination (dict): {"lat": float, "lon": float, "name": str?}
        riskAreas (list, optional): Risk assessments ({location, affectedRadius, overallRiskLevel, ...})
        avoidHighRisk (bool, optional): Prefer routes outside high/extreme areas (default: True)
        vehicleType (str, optional): driving | walking | cycling (default: driving)

    Returns:
        200: {
                routes: List of routes sorted by safety score,
                selected_route_id: id of the auto-selected route or null,
                calculation_metadata: {start, destination, timestamp, risk_areas_considered}
             }
        400: Invalid parameters
        503: Route service not configured
        500: Server error
    """
    try:
        data = request.get_json(silent=True)
        if not data:
            return jsonify({'error': 'Request body is required'}), 400

        options = RouteOptions.from_dict(data)
        risk_areas = _parse_risk_areas(data)

        service = get_route_service()
        routes, selected = service.calculate_and_select(options, risk_areas)

        logger.info(f"Calculated {len(routes)} routes from {format_point(options.start)} "
                    f"to {format_point(options.destination)}")

        response = {
            'routes': [route.to_dict() for route in routes],
            'selected_route_id': selected.id if selected else None,
            'calculation_metadata': {
                'start': options.start.to_dict(),
                'destination': options.destination.to_dict(),
                'timestamp': datetime.now(timezone.utc).isoformat(),
                'risk_areas_considered': len(risk_areas),
                'avoid_high_risk': options.avoid_high_risk,
                'vehicle_type': options.vehicle_type
            }
        }
        if not routes:
            response['message'] = 'No route found between the selected points'

        return jsonify(response), 200

    except InputError as e:
        return jsonify({'error': e.message, 'code': e.code}), 400
    except ConfigError as e:
        logger.error(f"Route calculation service not available: {e.message}")
        return jsonify({'error': 'Route calculation service not available', 'code': e.code}), 503
    except Exception as e:
        logger.error(f"Error calculating routes: {e}", exc_info=True)
        return jsonify({'error': 'Failed to calculate routes'}), 500


@app.route('/api/routes/select', methods=['POST'])
@limiter.limit("100 per hour")
def select_route():
    """
    Pick the best route from previously calculated routes.

    Request Body:
        routes (list): Routes as returned by /api/routes/calculate
        prioritizeSafety (bool, optional): Safety-first policy (default: True)

    Returns:
        200: {selected_route: route or null}
        400: Invalid parameters
    """
    try:
        data = request.get_json(silent=True)
        if not data or not isinstance(data, dict):
            return jsonify({'error': 'Request body is required'}), 400

        routes_data = data.get('routes')
        if not isinstance(routes_data, list):
            return jsonify({'error': 'routes must be a list'}), 400

        prioritize_safety = data.get('prioritizeSafety', True)
        if not isinstance(prioritize_safety, bool):
            return jsonify({'error': 'prioritizeSafety must be a boolean'}), 400

        routes = [SafeRoute.from_dict(route) for route in routes_data]
        selected = select_best_route(routes, prioritize_safety)

        return jsonify({'selected_route': selected.to_dict() if selected else None}), 200

    except InputError as e:
        return jsonify({'error': e.message, 'code': e.code}), 400
    except Exception as e:
        logger.error(f"Error selecting route: {e}", exc_info=True)
        return jsonify({'error': 'Failed to select route'}), 500


@app.route('/api/routes/status', methods=['GET'])
@limiter.limit("20 per hour")  # Each check makes a real provider request
def routing_status():
    """
    Check connectivity with the directions provider.

    Returns:
        200: {success: true, message}
        502: {success: false, message} when the provider rejected the test route
        503: Route service not configured
    """
    try:
        service = get_route_service()
    except ConfigError as e:
        return jsonify({'success': False, 'message': e.message, 'code': e.code}), 503

    result = service.routing_service.test_connection()
    return jsonify(result), 200 if result['success'] else 502


@app.errorhandler(413)
def request_entity_too_large(error):
    """
    Handle requests that exceed MAX_CONTENT_LENGTH.

    Returns:
        413: Payload too large error
    """
    return jsonify({
        'error': 'Request payload too large',
        'max_size': '1 MB'
    }), 413


@app.errorhandler(429)
def rate_limit_exceeded(error):
    """Handle rate limit violations."""
    return jsonify({
        'error': 'Rate limit exceeded',
        'message': str(error.description)
    }), 429


if __name__ == '__main__':
    # Use environment variable to control debug mode (defaults to False for production)
    debug_mode = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    app.run(debug=debug_mode, host='0.0.0.0', port=5001)
