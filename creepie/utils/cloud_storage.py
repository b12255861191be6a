"""
Utilidad: Manejo de Google Cloud Storage
Subida, lectura y borrado de imágenes de productos, con respaldo en disco
local cuando no hay bucket configurado
"""
import json
import logging
import os
import uuid

from flask import current_app
from google.cloud import storage
from werkzeug.utils import safe_join, secure_filename

logger = logging.getLogger(__name__)


def get_bucket_name():
    return current_app.config.get("GCS_BUCKET_NAME")


def get_storage_client():
    """Obtiene el cliente de Cloud Storage"""
    creds = (current_app.config.get("GOOGLE_APPLICATION_CREDENTIALS") or "").strip()

    if not creds:
        logger.warning("⚠️ GOOGLE_APPLICATION_CREDENTIALS no está configurado")
        return None

    try:
        # En Railway las credenciales llegan como JSON en la variable de entorno
        if creds.startswith("{"):
            return storage.Client.from_service_account_info(json.loads(creds))

        if os.path.exists(creds):
            return storage.Client.from_service_account_json(creds)

        logger.warning("⚠️ GOOGLE_APPLICATION_CREDENTIALS no es JSON ni una ruta existente")
        return None
    except (ValueError, OSError) as e:
        logger.error(f"❌ Error al inicializar Cloud Storage: {e}")
        return None


def blob_path_from_url(file_url, bucket_name):
    """/api/images/products/x.png | gs://bucket/products/x.png | https://storage.googleapis.com/bucket/... -> products/x.png"""
    if file_url.startswith("/api/images/"):
        return file_url[len("/api/images/"):]
    if file_url.startswith("gs://") or "storage.googleapis.com" in file_url:
        marker = f"{bucket_name}/"
        if marker in file_url:
            return file_url.split(marker, 1)[1]
    return file_url


def upload_file(file, folder="general"):
    """
    Sube un archivo a Cloud Storage

    Args:
        file: Archivo de Flask (FileStorage)
        folder: Carpeta destino en el bucket

    Returns:
        str: URL relativa servida por /api/images o None si falla
    """
    bucket_name = get_bucket_name()
    if not bucket_name:
        return None

    client = get_storage_client()
    if not client:
        return None

    try:
        filename = secure_filename(file.filename)
        unique_filename = f"{folder}/{uuid.uuid4()}_{filename}"

        blob = client.bucket(bucket_name).blob(unique_filename)
        blob.upload_from_file(file, content_type=file.content_type)

        logger.info(f"✅ Archivo subido a Cloud Storage: {unique_filename}")
        return f"/api/images/{unique_filename}"
    except Exception as e:
        logger.error(f"❌ Error al subir archivo: {e}")
        return None


def save_local(file, folder="general"):
    """Guarda el archivo en UPLOAD_FOLDER (se pierde en cada redeploy)"""
    upload_folder = os.path.join(current_app.config["UPLOAD_FOLDER"], folder)
    os.makedirs(upload_folder, exist_ok=True)

    unique_filename = f"{uuid.uuid4()}_{secure_filename(file.filename)}"
    file.save(os.path.join(upload_folder, unique_filename))
    return f"/uploads/{folder}/{unique_filename}"


def store_image(file, folder="products"):
    """Cloud Storage si está configurado, si no disco local"""
    if get_bucket_name():
        url = upload_file(file, folder=folder)
        if url:
            return url
        logger.warning("⚠️ Cloud Storage configurado pero falló la subida. Usando almacenamiento local")
    return save_local(file, folder=folder)


def get_file_content(path):
    """
    Obtiene el contenido de un archivo de Cloud Storage

    Returns:
        tuple: (content, content_type) o (None, None) si no existe
    """
    bucket_name = get_bucket_name()
    if not bucket_name:
        return None, None

    client = get_storage_client()
    if not client:
        return None, None

    try:
        blob = client.bucket(bucket_name).blob(blob_path_from_url(path, bucket_name))
        if not blob.exists():
            return None, None
        return blob.download_as_bytes(), blob.content_type or "application/octet-stream"
    except Exception as e:
        logger.error(f"❌ Error obteniendo archivo: {e}")
        return None, None


def delete_file(file_url):
    """
    Elimina una imagen (Cloud Storage o disco local)

    Returns:
        bool: True si se eliminó
    """
    if file_url.startswith("/uploads/"):
        local_path = safe_join(current_app.config["UPLOAD_FOLDER"], file_url[len("/uploads/"):])
        # None si la ruta sale de la carpeta de uploads
        if local_path and os.path.isfile(local_path):
            os.remove(local_path)
            return True
        return False

    bucket_name = get_bucket_name()
    if not bucket_name:
        return False

    client = get_storage_client()
    if not client:
        return False

    try:
        client.bucket(bucket_name).blob(blob_path_from_url(file_url, bucket_name)).delete()
        return True
    except Exception as e:
        logger.error(f"❌ Error al eliminar archivo: {e}")
        return False
