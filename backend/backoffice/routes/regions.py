# backend/backoffice/routes/regions.py
"""
State hubs and logistics partners.
"""
from flask import Blueprint, request, jsonify, current_app

from ..extensions import db
from ..decorators import require_auth, require_permission
from ..events import publish_change
from ..services import region_service
from ..services.concurrency import commit_session
from ..validation import ValidationError, ConflictError, NotFoundError


regions_bp = Blueprint("regions", __name__, url_prefix="/api/regions")


@regions_bp.get("")
@require_auth
@require_permission("VIEW_REGIONS")
def list_regions_route():
    regions = region_service.list_regions()
    return jsonify({"items": [r.to_dict() for r in regions], "count": len(regions)}), 200


@regions_bp.post("")
@require_auth
@require_permission("MANAGE_REGIONS")
def create_region_route():
    """
    Request body:
    {
        "name": str (unique),
        "whatsapp_group_link": str (optional)
    }
    """
    payload = request.get_json(silent=True) or {}
    try:
        region = region_service.create_region(payload=payload)
        commit_session()
        publish_change("regions")
        return jsonify(region.to_dict()), 201
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create region")
        return jsonify({"error": "Internal server error"}), 500


@regions_bp.put("/<int:region_id>")
@require_auth
@require_permission("MANAGE_REGIONS")
def update_region_route(region_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        region = region_service.update_region(region_id=region_id, payload=payload)
        commit_session()
        publish_change("regions")
        return jsonify(region.to_dict()), 200
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 409
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update region")
        return jsonify({"error": "Internal server error"}), 500


@regions_bp.get("/logistics-partners")
@require_auth
@require_permission("VIEW_LOGISTICS")
def list_partners_route():
    """Query params: region_id (optional)."""
    partners = region_service.list_logistics_partners(region_id=request.args.get("region_id", type=int))
    return jsonify({"items": [p.to_dict() for p in partners], "count": len(partners)}), 200


@regions_bp.post("/logistics-partners")
@require_auth
@require_permission("MANAGE_LOGISTICS")
def create_partner_route():
    """
    Request body:
    {
        "name": str,
        "region_id": int (optional),
        "contact_person": str (optional),
        "phone": str (optional)
    }
    """
    payload = request.get_json(silent=True) or {}
    try:
        partner = region_service.create_logistics_partner(payload=payload)
        commit_session()
        publish_change("logistics_partners")
        return jsonify(partner.to_dict()), 201
    except ValidationError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 404
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create logistics partner")
        return jsonify({"error": "Internal server error"}), 500
