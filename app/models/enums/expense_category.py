import enum


class ExpenseCategory(str, enum.Enum):
    acquisition = "acquisition"
    transportation = "transportation"
    import_ = "import"
    enhancement = "enhancement"
    marketing = "marketing"
    operational = "operational"
