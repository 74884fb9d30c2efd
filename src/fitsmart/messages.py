"""User-facing messages, keyed by id and locale."""

from typing import Dict

DEFAULT_LOCALE = "es"

MESSAGES: Dict[str, Dict[str, str]] = {
    "es": {
        "pre_analysis_failed": "Error analizando la rutina. Inténtalo de nuevo.",
        "deep_analysis_failed": "Error en el análisis profundo. Verifica tu conexión.",
        "video_analysis_failed": "No se pudo analizar el video. Intenta con un clip más corto.",
        "document_too_large": "Máximo {limit_mb}MB para imágenes/PDF.",
        "video_too_large": "El video debe pesar menos de {limit_mb}MB para el análisis.",
        "empty_input": "No hay contenido que analizar.",
        "invalid_encoding": "El archivo no se pudo leer correctamente.",
        "missing_media_type": "Falta el tipo de archivo para este contenido.",
        "csv_unmappable": "No se pudo leer este archivo. Asegúrate de que sea una exportación CSV de Hevy, Strong o similar.",
        "csv_empty": "El archivo CSV no contiene entrenamientos.",
        "profile_incomplete": "Completa el objetivo, el tipo de entrenamiento, la edad y la respuesta clave (más de 3 caracteres).",
        "unsupported_kind": "Tipo de archivo no soportado.",
        "unexpected_error": "Ha ocurrido un error inesperado. Inténtalo de nuevo.",
    },
    "en": {
        "pre_analysis_failed": "Could not analyze the routine. Please try again.",
        "deep_analysis_failed": "Deep analysis failed. Check your connection.",
        "video_analysis_failed": "Could not analyze the video. Try a shorter clip.",
        "document_too_large": "Images and PDFs are limited to {limit_mb}MB.",
        "video_too_large": "Videos must be under {limit_mb}MB for analysis.",
        "empty_input": "There is no content to analyze.",
        "invalid_encoding": "The file could not be read correctly.",
        "missing_media_type": "The media type is missing for this content.",
        "csv_unmappable": "Could not read this file. Make sure it is a Hevy, Strong or similar CSV export.",
        "csv_empty": "The CSV file contains no workouts.",
        "profile_incomplete": "Fill in goal, training type, age and the key answer (more than 3 characters).",
        "unsupported_kind": "Unsupported file type.",
        "unexpected_error": "An unexpected error occurred. Please try again.",
    },
}


def get_message(key: str, locale: str = DEFAULT_LOCALE, **kwargs) -> str:
    """Look up a localized message, falling back to the default locale."""
    table = MESSAGES.get(locale, MESSAGES[DEFAULT_LOCALE])
    template = table.get(key) or MESSAGES[DEFAULT_LOCALE][key]
    return template.format(**kwargs) if kwargs else template
