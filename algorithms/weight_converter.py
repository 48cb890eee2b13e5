class WeightConverter:
    """Convert and display set weights."""

    KG_TO_LB = 2.20462

    @staticmethod
    def kg_to_lb(kg: float) -> float:
        return round(kg * WeightConverter.KG_TO_LB, 2)

    @staticmethod
    def lb_to_kg(lb: float) -> float:
        return round(lb / WeightConverter.KG_TO_LB, 2)

    @staticmethod
    def format_weight(value: float) -> str:
        """Format with at most two decimals and no trailing zeros."""
        text = f"{round(float(value), 2):.2f}".rstrip("0").rstrip(".")
        return "0" if text in ("", "-0") else text

    @classmethod
    def display(cls, weight_kg: float, unit: str = "kg") -> str:
        if unit == "lb":
            return f"{cls.format_weight(cls.kg_to_lb(weight_kg))} lb"
        return f"{cls.format_weight(weight_kg)} kg"

    @classmethod
    def to_kg(cls, value: float, unit: str = "kg") -> float:
        if unit == "lb":
            return cls.lb_to_kg(value)
        return float(value)
