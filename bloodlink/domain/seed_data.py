"""Static Lahore road network plus demo donors and opening bank stock."""

from __future__ import annotations

from bloodlink.domain.models import BloodType, Donor, InventoryEntry, Location, RoadEdge


LAHORE_LOCATIONS: tuple[Location, ...] = (
    Location("gulberg", "Gulberg", 31.5204, 74.3587),
    Location("dha", "DHA", 31.4697, 74.4039),
    Location("johar_town", "Johar Town", 31.4697, 74.2728),
    Location("model_town", "Model Town", 31.4834, 74.3155),
    Location("allama_iqbal_town", "Allama Iqbal Town", 31.4947, 74.2603),
    Location("garden_town", "Garden Town", 31.5124, 74.3295),
    Location("cantt", "Cantt", 31.5497, 74.3436),
    Location("township", "Township", 31.4503, 74.2833),
    Location("wapda_town", "Wapda Town", 31.4587, 74.2528),
    Location("bahria_town", "Bahria Town", 31.3677, 74.1805),
    Location("iqbal_town", "Iqbal Town", 31.5012, 74.2456),
    Location("sabzazar", "Sabzazar", 31.4789, 74.2678),
    Location("faisal_town", "Faisal Town", 31.4556, 74.3012),
    Location("cavalry_ground", "Cavalry Ground", 31.5123, 74.3678),
    Location("defence_raya", "Defence Raya", 31.4234, 74.4123),
    Location("valencia", "Valencia Town", 31.4012, 74.2234),
    Location("paragon_city", "Paragon City", 31.3856, 74.1567),
    Location("lake_city", "Lake City", 31.3523, 74.1234),
    Location("mall_road", "Mall Road", 31.5567, 74.3234),
    Location("old_lahore", "Old Lahore (Walled City)", 31.5823, 74.3156),
    Location("shadman", "Shadman", 31.5345, 74.3456),
    Location("liberty", "Liberty Market Area", 31.5123, 74.3412),
    Location("peco_road", "PECO Road", 31.4534, 74.2456),
    Location("raiwind", "Raiwind", 31.2567, 74.2123),
)


# Distances in km; every edge is traversable both ways.
LAHORE_ROAD_EDGES: tuple[RoadEdge, ...] = (
    RoadEdge("gulberg", "model_town", 4),
    RoadEdge("gulberg", "garden_town", 3),
    RoadEdge("gulberg", "cantt", 5),
    RoadEdge("gulberg", "dha", 7),
    RoadEdge("gulberg", "liberty", 2),
    RoadEdge("gulberg", "shadman", 3),
    RoadEdge("gulberg", "cavalry_ground", 4),
    RoadEdge("model_town", "township", 6),
    RoadEdge("model_town", "allama_iqbal_town", 5),
    RoadEdge("model_town", "johar_town", 7),
    RoadEdge("model_town", "faisal_town", 5),
    RoadEdge("model_town", "garden_town", 5),
    RoadEdge("dha", "johar_town", 8),
    RoadEdge("dha", "cantt", 9),
    RoadEdge("dha", "bahria_town", 12),
    RoadEdge("dha", "defence_raya", 5),
    RoadEdge("dha", "valencia", 10),
    RoadEdge("johar_town", "wapda_town", 4),
    RoadEdge("johar_town", "allama_iqbal_town", 6),
    RoadEdge("johar_town", "faisal_town", 4),
    RoadEdge("allama_iqbal_town", "township", 4),
    RoadEdge("allama_iqbal_town", "sabzazar", 3),
    RoadEdge("allama_iqbal_town", "iqbal_town", 4),
    RoadEdge("garden_town", "cantt", 4),
    RoadEdge("garden_town", "liberty", 2),
    RoadEdge("cantt", "mall_road", 3),
    RoadEdge("cantt", "shadman", 4),
    RoadEdge("cantt", "cavalry_ground", 5),
    RoadEdge("township", "wapda_town", 5),
    RoadEdge("township", "peco_road", 4),
    RoadEdge("township", "sabzazar", 5),
    RoadEdge("wapda_town", "bahria_town", 15),
    RoadEdge("wapda_town", "valencia", 8),
    RoadEdge("bahria_town", "paragon_city", 6),
    RoadEdge("bahria_town", "lake_city", 8),
    RoadEdge("bahria_town", "raiwind", 10),
    RoadEdge("iqbal_town", "sabzazar", 3),
    RoadEdge("iqbal_town", "peco_road", 5),
    RoadEdge("faisal_town", "valencia", 7),
    RoadEdge("cavalry_ground", "shadman", 3),
    RoadEdge("defence_raya", "valencia", 8),
    RoadEdge("valencia", "paragon_city", 10),
    RoadEdge("paragon_city", "lake_city", 5),
    RoadEdge("lake_city", "raiwind", 8),
    RoadEdge("mall_road", "old_lahore", 4),
    RoadEdge("mall_road", "shadman", 3),
    RoadEdge("old_lahore", "shadman", 5),
    RoadEdge("shadman", "liberty", 2),
    RoadEdge("peco_road", "raiwind", 12),
)


DEMO_DONORS: tuple[Donor, ...] = (
    Donor("1", "Ahmed Khan", BloodType.A_POS, "gulberg", "0300-1234567"),
    Donor("2", "Sara Ali", BloodType.O_NEG, "dha", "0301-2345678"),
    Donor("3", "Usman Malik", BloodType.B_POS, "model_town", "0302-3456789"),
    Donor("4", "Fatima Hassan", BloodType.AB_POS, "johar_town", "0303-4567890", is_available=False),
    Donor("5", "Bilal Ahmed", BloodType.A_NEG, "garden_town", "0304-5678901"),
    Donor("6", "Ayesha Tariq", BloodType.O_POS, "cantt", "0305-6789012"),
    Donor("7", "Hassan Raza", BloodType.B_NEG, "township", "0306-7890123"),
    Donor("8", "Zara Sheikh", BloodType.AB_NEG, "bahria_town", "0307-8901234", is_available=False),
    Donor("9", "Ali Hussain", BloodType.O_NEG, "allama_iqbal_town", "0308-9012345"),
    Donor("10", "Maryam Nawaz", BloodType.A_POS, "wapda_town", "0309-0123456"),
)


def opening_inventory(o_negative_reserve: int = 3) -> list[InventoryEntry]:
    """Opening stock; O- keeps a reserve for extreme emergencies."""
    return [
        InventoryEntry(BloodType.A_POS, 15),
        InventoryEntry(BloodType.A_NEG, 8),
        InventoryEntry(BloodType.B_POS, 12),
        InventoryEntry(BloodType.B_NEG, 6),
        InventoryEntry(BloodType.AB_POS, 10),
        InventoryEntry(BloodType.AB_NEG, 4),
        InventoryEntry(BloodType.O_POS, 20),
        InventoryEntry(BloodType.O_NEG, 5, max(0, min(o_negative_reserve, 5))),
    ]
