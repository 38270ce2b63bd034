from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class PlanConfig:
    name: str
    price_cents: int
    description: str


PLANS: Dict[str, PlanConfig] = {
    "premium": PlanConfig(
        name="Festiva Premium",
        price_cents=2990,
        description="Acesso completo ao Festiva com IA e templates premium",
    ),
    "family": PlanConfig(
        name="Festiva Família",
        price_cents=4990,
        description="Plano família com até 5 membros",
    ),
}
