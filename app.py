# app.py
import logging
from typing import List, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request

# Core Application Imports
from helpers.map_helpers import parse_coordinate, pins_as_geojson, route_as_geojson
from walksafe.config import WalkSafeConfig

# Route Planning, Advisor & Pin Store Imports
from walksafe.advisor import SafetyAdvisor
from walksafe.pin_store import PinStore, PinStoreError, create_pin_store
from walksafe.route_planner import Coordinate, HazardPin, OSRMRouteHandler, SafeRoutePlanner

MIN_PLACE_QUERY_LENGTH = 3

def create_app(config: Optional[WalkSafeConfig] = None, pin_store: Optional[PinStore] = None,
               route_handler=None, advisor: Optional[SafetyAdvisor] = None) -> Flask:
    config = config or WalkSafeConfig.from_env()
    pin_store = pin_store or create_pin_store(config)
    advisor = advisor or SafetyAdvisor(api_key=config.gemini_api_key, model_name=config.gemini_model)
    route_handler = route_handler or OSRMRouteHandler(config.osrm_base_url, config.request_timeout,
                                                      config.cache_enabled)
    planner = SafeRoutePlanner(route_handler=route_handler, annotator=advisor)

    app = Flask(__name__)

    # Global State Dictionary
    state = {
        'pins': [],
        'unsubscribe': None,
        'default_center': Coordinate(config.default_lat, config.default_lng),
    }

    def on_pins(pins: List[HazardPin]):
        state['pins'] = list(pins)
        logging.info(f"Pin snapshot updated: {len(pins)} pins.")

    state['unsubscribe'] = pin_store.subscribe(on_pins)
    app.extensions['walksafe'] = {'state': state, 'pin_store': pin_store, 'planner': planner, 'advisor': advisor}

    def location_from_args(default: Coordinate) -> Coordinate:
        lat, lng = request.args.get('lat'), request.args.get('lng')
        if lat is None or lng is None:
            return default
        return Coordinate(float(lat), float(lng))

    @app.route('/')
    def index():
        return jsonify({
            'service': 'WalkSafe',
            'pin_store': pin_store.backend_name,
            'advisor_enabled': advisor.enabled,
            'endpoints': ['/pins', '/seed', '/route', '/advisor', '/places'],
        })

    @app.route('/pins', methods=['GET'])
    def list_pins():
        return jsonify(pins_as_geojson(state['pins']))

    @app.route('/pins', methods=['POST'])
    def add_pin():
        data = request.get_json(silent=True) or {}
        try:
            pin = pin_store.add_pin(data)
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        except PinStoreError as e:
            logging.error(f"Error adding pin: {e}")
            return jsonify({'error': str(e)}), 500
        return jsonify(pin.to_dict()), 201

    @app.route('/pins/<pin_id>', methods=['DELETE'])
    def remove_pin(pin_id):
        try:
            pin_store.remove_pin(pin_id)
        except PinStoreError as e:
            logging.error(f"Error removing pin {pin_id}: {e}")
            return jsonify({'success': False, 'error': str(e)}), 500
        return jsonify({'success': True, 'id': pin_id})

    @app.route('/seed', methods=['POST'])
    def seed():
        data = request.get_json(silent=True) or {}
        try:
            center = parse_coordinate(data, 'center') if data else state['default_center']
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        seeded = pin_store.seed_data(center)
        return jsonify({'success': True, 'seeded': seeded})

    @app.route('/route', methods=['POST'])
    def calculate_route():
        data = request.get_json(silent=True) or {}
        try:
            start = parse_coordinate(data.get('start', state['default_center'].to_dict()), 'start')
            destination = parse_coordinate(data.get('destination'), 'destination')
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        destination_name = data.get('destinationName') or "Pinned Location"

        logging.info(f"Calculating route to '{destination_name}' against {len(state['pins'])} pins.")
        result = planner.get_safe_route(start, destination, destination_name, list(state['pins']))

        response_data = result.to_dict()
        response_data['geojson'] = route_as_geojson(result)
        return jsonify(response_data)

    @app.route('/advisor')
    def analyze_area():
        try:
            location = location_from_args(state['default_center'])
        except ValueError:
            return jsonify({'error': "'lat' and 'lng' must be numbers."}), 400
        return jsonify(advisor.analyze_safety(location).to_dict())

    @app.route('/places')
    def search_places():
        query = (request.args.get('q') or '').strip()
        try:
            center = location_from_args(state['default_center'])
        except ValueError:
            return jsonify({'error': "'lat' and 'lng' must be numbers."}), 400
        if len(query) < MIN_PLACE_QUERY_LENGTH:
            return jsonify([])
        return jsonify([place.to_dict() for place in advisor.search_places(query, center)])

    return app

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    load_dotenv()
    app = create_app()
    app.run(debug=True, use_reloader=False)
