"""Supabase repository for the government nutrition database."""

from dataclasses import dataclass

from supabase import Client

from food_search.domain.sources import GovernmentFoodRecord
from food_search.providers.government import GovernmentFoodRepository

_COLUMNS = (
    "id, name_he, name_en, brand, category, calories_per_100g, "
    "protein_g_per_100g, carbs_g_per_100g, fat_g_per_100g, "
    "sugars_g_per_100g, sodium_mg_per_100g, fiber_g_per_100g"
)


@dataclass
class SupabaseGovernmentFoodRepository(GovernmentFoodRepository):
    """Supabase-backed lookups over the government foods table."""

    client: Client
    table_name: str = "israel_moh_foods"

    def search_by_name(self, term: str, limit: int) -> list[GovernmentFoodRecord]:
        """Return foods whose Hebrew name contains the term."""
        response = (
            self.client.table(self.table_name)
            .select(_COLUMNS)
            .ilike("name_he", f"%{term}%")
            .limit(limit)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> GovernmentFoodRecord:
    return GovernmentFoodRecord(
        id=str(row["id"]),
        name_he=_optional_str(row.get("name_he")),
        name_en=_optional_str(row.get("name_en")),
        brand=_optional_str(row.get("brand")),
        category=_optional_str(row.get("category")),
        calories=_optional_float(row.get("calories_per_100g")),
        protein_g=_optional_float(row.get("protein_g_per_100g")),
        carbs_g=_optional_float(row.get("carbs_g_per_100g")),
        fat_g=_optional_float(row.get("fat_g_per_100g")),
        sugars_g=_optional_float(row.get("sugars_g_per_100g")),
        sodium_mg=_optional_float(row.get("sodium_mg_per_100g")),
        fiber_g=_optional_float(row.get("fiber_g_per_100g")),
    )


def _optional_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
