from collections.abc import Callable
from decimal import Decimal

from invoicer.core.errors import UnsupportedChargeModelError
from invoicer.models.charge import ChargeModel
from invoicer.services.charge_models import graduated_percentage

# Every calculator takes (units, properties, events_count) and returns the
# amount in currency units.
CalculatorFn = Callable[..., Decimal]

_CALCULATORS: dict[ChargeModel, CalculatorFn] = {
    ChargeModel.GRADUATED_PERCENTAGE: graduated_percentage.calculate,
}


def get_charge_calculator(model: ChargeModel | str) -> CalculatorFn:
    try:
        return _CALCULATORS[ChargeModel(model)]
    except (KeyError, ValueError):
        raise UnsupportedChargeModelError(str(model)) from None
