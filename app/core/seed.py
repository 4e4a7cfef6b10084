"""Default spending categories for Chilean bank transactions, loaded into an empty store."""

from app.core.db import DBHelper
from app.core.utils import get_logger

logger = get_logger("gastonauta.seed")

DEFAULT_CATEGORIES: list[dict] = [
    {
        "name": "Supermercado",
        "description": "Compras en supermercados como Walmart, Tottus, Jumbo, Líder, etc.",
        "keywords": ["tottus", "jumbo", "lider", "líder", "unimarc", "santa isabel", "acuenta", "walmart"],
    },
    {
        "name": "Combustible",
        "description": "Bencinas en estaciones como Shell, Copec, Petrobras, etc.",
        "keywords": ["shell", "copec", "petrobras", "aramco", "enex", "bencina"],
    },
    {
        "name": "Restaurante",
        "description": "Restaurantes, cafés y delivery de comida.",
        "keywords": ["restaurant", "cafe", "café", "sushi", "pizza", "rappi", "pedidosya", "starbucks"],
    },
    {
        "name": "Transporte",
        "description": "Uber, taxis, Metro, buses.",
        "keywords": ["uber", "cabify", "didi", "metro", "bip", "turbus", "pullman"],
    },
    {
        "name": "Servicios",
        "description": "Cuentas de servicios como luz, agua, teléfono, internet, Netflix, Spotify.",
        "keywords": ["enel", "aguas andinas", "entel", "movistar", "vtr", "wom", "netflix", "spotify", "servicios"],
    },
    {
        "name": "Entretenimiento",
        "description": "Cine, juegos, streaming, eventos.",
        "keywords": ["cinemark", "cineplanet", "ticketmaster", "puntoticket", "steam", "playstation"],
    },
    {
        "name": "Otros",
        "description": "Cualquier gasto que no encaje en las categorías anteriores.",
        "keywords": [],
    },
]


def seed_default_categories(db: DBHelper) -> int:
    """Insert the default categories when the store has none. Returns how many were added."""
    if db.count_categories():
        return 0
    for category in DEFAULT_CATEGORIES:
        db.add_category(category["name"], category["description"], category["keywords"])
    logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories")
    return len(DEFAULT_CATEGORIES)
