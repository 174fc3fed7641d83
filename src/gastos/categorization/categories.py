"""Built-in category names."""

DEFAULT_CATEGORY = "Otros"

DEFAULT_CATEGORIES = [
    "Alimentación",
    "Transporte",
    "Entretenimiento",
    "Salud",
    "Servicios",
    "Compras",
    "Educación",
    "Viajes",
    "Café",
    DEFAULT_CATEGORY,
]
