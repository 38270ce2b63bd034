from typing import Dict, List, Optional

from app.schemas.card_schema import CardTemplate

DEFAULT_TEMPLATE_ID = "christmas-classic"

CARD_TEMPLATES: List[CardTemplate] = [
    CardTemplate(id="christmas-classic", name="Natal Clássico", emoji="🎄", is_premium=False),
    CardTemplate(id="winter-wonderland", name="Inverno Mágico", emoji="❄️", is_premium=True),
    CardTemplate(id="golden-elegance", name="Elegância Dourada", emoji="✨", is_premium=True),
    CardTemplate(id="festive-red", name="Vermelho Festivo", emoji="🎁", is_premium=True),
    CardTemplate(id="midnight-stars", name="Noite Estrelada", emoji="🌟", is_premium=True),
    CardTemplate(id="new-year-party", name="Réveillon", emoji="🎆", is_premium=True),
    CardTemplate(id="cozy-christmas", name="Natal Aconchegante", emoji="🕯️", is_premium=True),
    CardTemplate(id="nordic-frost", name="Frost Nórdico", emoji="🦌", is_premium=True),
]

_TEMPLATES_BY_ID: Dict[str, CardTemplate] = {template.id: template for template in CARD_TEMPLATES}


def get_template(template_id: Optional[str]) -> Optional[CardTemplate]:
    return _TEMPLATES_BY_ID.get(template_id) if template_id else None


def get_template_or_default(template_id: Optional[str]) -> CardTemplate:
    return get_template(template_id) or _TEMPLATES_BY_ID[DEFAULT_TEMPLATE_ID]
