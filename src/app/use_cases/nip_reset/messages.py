"""User-facing strings. Part of the public contract, keep them stable."""

NOT_FOUND = "Datos incorrectos"
INVALID_REQUEST = "Solicitud invalida."
RATE_LIMITED = "Has alcanzado el limite de solicitudes. Intenta mas tarde."
LINK_SENT = "Hemos enviado al correo registrado la URL para reiniciar tu NIP."
INVALID_OR_EXPIRED_TOKEN = "Liga invalida o expirada."
INVALID_NIP = "El NIP debe tener 4 digitos."
NIP_MISMATCH = "Los NIP no coinciden."
DEPENDENCY_UNAVAILABLE = "Servicio no disponible. Intenta mas tarde."
NIP_UPDATED = "Listo. Tu NIP fue actualizado."
INTERNAL_ERROR = "Ocurrio un error. Intenta mas tarde."
