"""
Sample datasets for demos: health measurements, food logs and a supplement
catalog, each with its column descriptors and grid options.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from grid_types import Align, ColumnDescriptor, GridOptions

Row = dict[str, Any]


def compare_instants(a: str, b: str) -> int:
    """Compare ISO-8601 timestamps by the instant they denote, not as text."""
    left, right = datetime.fromisoformat(a), datetime.fromisoformat(b)
    return (left > right) - (left < right)


def format_timestamp(value: str) -> str:
    return datetime.fromisoformat(value).strftime("%b %d %H:%M")


def format_currency(value: float) -> str:
    return f"${value:,.2f}"


def _title(value: str) -> str:
    return value.replace("_", " ").title()


# =============================================================================
# Health Metrics
# =============================================================================


HEALTH_METRICS: list[Row] = [
    {"id": "hm-1", "metric_type": "heart_rate", "value": 62, "unit": "bpm", "source": "wearable",
     "timestamp": "2024-03-01T07:30:00+00:00", "device": "Oura Ring"},
    {"id": "hm-2", "metric_type": "glucose", "value": 94, "unit": "mg/dL", "source": "cgm",
     "timestamp": "2024-03-01T08:00:00+02:00", "device": "Libre 3"},
    {"id": "hm-3", "metric_type": "steps", "value": 8432, "unit": "steps", "source": "wearable",
     "timestamp": "2024-03-01T21:00:00+00:00", "device": "Apple Watch"},
    {"id": "hm-4", "metric_type": "sleep", "value": 7.4, "unit": "h", "source": "wearable",
     "timestamp": "2024-03-02T06:45:00+00:00", "device": "Oura Ring"},
    {"id": "hm-5", "metric_type": "hrv", "value": 48, "unit": "ms", "source": "wearable",
     "timestamp": "2024-03-02T06:46:00+00:00", "device": "Oura Ring"},
    {"id": "hm-6", "metric_type": "glucose", "value": 131, "unit": "mg/dL", "source": "cgm",
     "timestamp": "2024-03-02T13:15:00+00:00", "device": "Libre 3"},
    {"id": "hm-7", "metric_type": "energy", "value": 7, "unit": "/10", "source": "manual",
     "timestamp": "2024-03-02T15:00:00+00:00", "device": None},
    {"id": "hm-8", "metric_type": "stress", "value": 3, "unit": "/10", "source": "manual",
     "timestamp": "2024-03-02T18:30:00+00:00", "device": None},
    {"id": "hm-9", "metric_type": "heart_rate", "value": 71, "unit": "bpm", "source": "calculated",
     "timestamp": "2024-03-03T09:10:00+00:00", "device": "Apple Watch"},
    {"id": "hm-10", "metric_type": "glucose", "value": 88, "unit": "mg/dL", "source": "cgm",
     "timestamp": "2024-03-03T07:05:00+00:00", "device": "Libre 3"},
    {"id": "hm-11", "metric_type": "steps", "value": 12011, "unit": "steps", "source": "wearable",
     "timestamp": "2024-03-03T21:00:00+00:00", "device": "Apple Watch"},
    {"id": "hm-12", "metric_type": "sleep", "value": 6.1, "unit": "h", "source": "wearable",
     "timestamp": "2024-03-04T06:20:00+00:00", "device": "Oura Ring"},
]

HEALTH_METRIC_COLUMNS: list[ColumnDescriptor[Row]] = [
    ColumnDescriptor("metric_type", "Metric", "metric_type", sortable=True, filterable=True, format=_title),
    ColumnDescriptor(
        "value", "Value", "value", sortable=True, align=Align.RIGHT,
        description="Measured value in the metric's unit",
    ),
    ColumnDescriptor("unit", "Unit", "unit", interactive=False),
    ColumnDescriptor("source", "Source", "source", sortable=True, filterable=True, format=_title),
    ColumnDescriptor(
        "timestamp", "Date & Time", "timestamp", sortable=True,
        format=format_timestamp, comparator=compare_instants,
    ),
    ColumnDescriptor("device", "Device", "device", filterable=True),
]

HEALTH_METRIC_OPTIONS = GridOptions(
    page_size=5,
    searchable=True,
    caption="Health metrics data showing biometric measurements over time",
    empty_message="No health metrics recorded",
)


# =============================================================================
# Food Logs
# =============================================================================


FOOD_LOGS: list[Row] = [
    {"id": "fl-1", "food_name": "Greek yogurt with berries", "meal_type": "breakfast", "calories": 240,
     "protein": 18, "carbohydrates": 28, "fat": 6, "glucose_impact": 22, "meal_time": "2024-03-01T07:45:00+00:00"},
    {"id": "fl-2", "food_name": "Chicken salad", "meal_type": "lunch", "calories": 520,
     "protein": 42, "carbohydrates": 18, "fat": 30, "glucose_impact": 15, "meal_time": "2024-03-01T12:30:00+00:00"},
    {"id": "fl-3", "food_name": "Almonds", "meal_type": "snack", "calories": 170,
     "protein": 6, "carbohydrates": 6, "fat": 15, "glucose_impact": 5, "meal_time": "2024-03-01T15:10:00+00:00"},
    {"id": "fl-4", "food_name": "Salmon with rice", "meal_type": "dinner", "calories": 680,
     "protein": 45, "carbohydrates": 60, "fat": 24, "glucose_impact": 48, "meal_time": "2024-03-01T19:00:00+00:00"},
    {"id": "fl-5", "food_name": "Oatmeal", "meal_type": "breakfast", "calories": 300,
     "protein": 10, "carbohydrates": 54, "fat": 5, "glucose_impact": 55, "meal_time": "2024-03-02T07:30:00+00:00"},
    {"id": "fl-6", "food_name": "Lentil soup", "meal_type": "lunch", "calories": 410,
     "protein": 24, "carbohydrates": 58, "fat": 8, "glucose_impact": None, "meal_time": "2024-03-02T12:45:00+00:00"},
    {"id": "fl-7", "food_name": "Protein bar", "meal_type": "snack", "calories": 210,
     "protein": 20, "carbohydrates": 22, "fat": 7, "glucose_impact": 30, "meal_time": "2024-03-02T16:00:00+00:00"},
]


def _macros(row: Row) -> str:
    return f"{row['protein']}g / {row['carbohydrates']}g / {row['fat']}g"


def _glucose_impact(value: int) -> str:
    level = "high" if value > 40 else "medium" if value > 20 else "low"
    return f"+{value} ({level})"


FOOD_LOG_COLUMNS: list[ColumnDescriptor[Row]] = [
    ColumnDescriptor("food_name", "Food Item", "food_name", sortable=True, filterable=True),
    ColumnDescriptor("meal_type", "Meal Type", "meal_type", sortable=True, filterable=True, format=_title),
    ColumnDescriptor(
        "calories", "Calories", "calories", sortable=True, align=Align.RIGHT,
        format=lambda value: f"{value} kcal",
    ),
    ColumnDescriptor("macros", "Macros (P/C/F)", _macros, interactive=False),
    ColumnDescriptor(
        "glucose_impact", "Glucose Impact", "glucose_impact", sortable=True, align=Align.CENTER,
        format=_glucose_impact,
    ),
    ColumnDescriptor(
        "meal_time", "When", "meal_time", sortable=True,
        format=format_timestamp, comparator=compare_instants,
    ),
]

FOOD_LOG_OPTIONS = GridOptions(
    page_size=4,
    selectable=True,
    searchable=True,
    caption="Food consumption log showing meals, nutritional information, and glucose impact data",
    empty_message="No meals logged yet",
)


# =============================================================================
# Supplements
# =============================================================================


SUPPLEMENTS: list[Row] = [
    {"id": "sp-1", "name": "Magnesium Glycinate", "category": "Minerals", "tier": "green",
     "evidence_rating": 4.5, "price": 24.0, "stock_quantity": 120, "is_available": True},
    {"id": "sp-2", "name": "Vitamin D3", "category": "Vitamins", "tier": "green",
     "evidence_rating": 4.8, "price": 12.5, "stock_quantity": 300, "is_available": True},
    {"id": "sp-3", "name": "Omega-3 Fish Oil", "category": "Fatty Acids", "tier": "green",
     "evidence_rating": 4.6, "price": 32.0, "stock_quantity": 0, "is_available": False},
    {"id": "sp-4", "name": "Ashwagandha", "category": "Adaptogens", "tier": "yellow",
     "evidence_rating": 3.9, "price": 19.99, "stock_quantity": 45, "is_available": True},
    {"id": "sp-5", "name": "Creatine Monohydrate", "category": "Performance", "tier": "green",
     "evidence_rating": 4.7, "price": 29.0, "stock_quantity": 80, "is_available": True},
    {"id": "sp-6", "name": "Lion's Mane", "category": "Nootropics", "tier": "orange",
     "evidence_rating": 3.1, "price": 34.5, "stock_quantity": 12, "is_available": True},
    {"id": "sp-7", "name": "Rhodiola Rosea", "category": "Adaptogens", "tier": "yellow",
     "evidence_rating": None, "price": 22.0, "stock_quantity": 30, "is_available": True},
    {"id": "sp-8", "name": "NAD+ Precursor", "category": "Longevity", "tier": "red",
     "evidence_rating": 2.4, "price": 59.0, "stock_quantity": 8, "is_available": True},
]


def _rating(value: float) -> str:
    return "★" * round(value) + f" {value:.1f}"


def _availability(row: Row) -> str:
    if not row["is_available"] or row["stock_quantity"] == 0:
        return "Out of stock"
    if row["stock_quantity"] < 20:
        return f"Low stock ({row['stock_quantity']})"
    return "In stock"


SUPPLEMENT_COLUMNS: list[ColumnDescriptor[Row]] = [
    ColumnDescriptor(
        "name", "Supplement", "name", sortable=True, filterable=True,
        description="Supplement name and category information",
    ),
    ColumnDescriptor("category", "Category", "category", sortable=True, filterable=True),
    ColumnDescriptor("evidence_rating", "Evidence Rating", "evidence_rating", sortable=True,
                     align=Align.CENTER, format=_rating),
    ColumnDescriptor("tier", "Evidence Tier", "tier", sortable=True, filterable=True,
                     align=Align.CENTER, format=str.upper),
    ColumnDescriptor("price", "Price", "price", sortable=True, align=Align.RIGHT, format=format_currency),
    ColumnDescriptor("availability", "Availability", _availability, align=Align.CENTER),
]

SUPPLEMENT_OPTIONS = GridOptions(
    page_size=5,
    selectable=True,
    searchable=True,
    caption="Supplement catalog with evidence ratings, pricing and availability",
    empty_message="No supplements match your criteria",
)


DATASETS: dict[str, tuple[list[Row], list[ColumnDescriptor[Row]], GridOptions]] = dict(
    metrics=(HEALTH_METRICS, HEALTH_METRIC_COLUMNS, HEALTH_METRIC_OPTIONS),
    foods=(FOOD_LOGS, FOOD_LOG_COLUMNS, FOOD_LOG_OPTIONS),
    supplements=(SUPPLEMENTS, SUPPLEMENT_COLUMNS, SUPPLEMENT_OPTIONS),
)
