"""
File upload API endpoints for product images and documents.
"""

from flask import request

from marketplace.enums import UserRole
from marketplace.routes import api_bp
from marketplace.services.storage_service import storage_service
from marketplace.utils import current_user_id, is_admin, roles_required, success_response

SELLER_ROLES = (UserRole.SELLER.value, UserRole.BOTH.value)


@api_bp.route('/uploads', methods=['POST'])
@roles_required(*SELLER_ROLES)
def upload_file():
    """Store one multipart 'file' in the public or documents folder."""
    stored = storage_service.save(
        request.files.get('file'),
        request.form.get('folder'),
        owner_id=current_user_id(),
    )
    return success_response(stored.to_dict(), status_code=201)


@api_bp.route('/uploads/<path:path>', methods=['DELETE'])
@roles_required(*SELLER_ROLES)
def delete_file(path: str):
    storage_service.delete(path, actor_id=current_user_id(), actor_is_admin=is_admin())
    return success_response(message='File deleted successfully')
