"""
API: Imágenes
Sirve las fotos de productos guardadas en Google Cloud Storage
"""
import logging
from flask import Blueprint, Response
from ..utils.cloud_storage import get_file_content

logger = logging.getLogger(__name__)

bp = Blueprint("images", __name__)


@bp.route("/<path:image_path>", methods=["GET"])
def serve_image(image_path):
    """
    Args:
        image_path: ruta dentro del bucket (ej: products/<uuid>_torta.png)
    """
    try:
        content, content_type = get_file_content(image_path)
    except Exception as e:
        logger.error(f"❌ Error sirviendo imagen {image_path}: {e}")
        return Response(f"Error: {str(e)}", status=500, mimetype="text/plain")

    if content is None:
        return Response("Imagen no encontrada", status=404, mimetype="text/plain")

    response = Response(content, mimetype=content_type)
    response.headers["Cache-Control"] = "public, max-age=31536000"
    return response
