# Conductor and insulation reference notes shown next to the calculators
MATERIALS = {
    "PVC": {
        "name": "PVC (Polyvinyl Chloride)",
        "description": "Most common insulation material with good electrical properties and flame retardancy.",
        "temperature": "70°C max operating temperature",
        "advantages": [
            "Cost-effective",
            "Good mechanical strength",
            "Resistant to acids and alkalis",
        ],
        "disadvantages": [
            "Lower temperature rating than XLPE",
            "Less resistant to oils and solvents",
        ],
        "applications": "Residential wiring, control cables, indoor installations",
    },
    "XLPE": {
        "name": "XLPE (Cross-Linked Polyethylene)",
        "description": "Superior insulation with molecular cross-linking for enhanced performance.",
        "temperature": "90°C max operating temperature",
        "advantages": [
            "Higher current capacity",
            "Better moisture resistance",
            "Superior thermal characteristics",
        ],
        "disadvantages": [
            "More expensive than PVC",
            "Requires special stripping tools",
        ],
        "applications": "Power distribution, underground cables, industrial applications",
    },
    "copper": {
        "name": "Copper Conductor",
        "description": "Premium conductor material with excellent electrical properties.",
        "conductivity": "58 MS/m",
        "temperature": "90°C max operating temperature",
        "advantages": [
            "Highest conductivity",
            "Better corrosion resistance",
            "More durable connections",
        ],
        "disadvantages": [
            "More expensive",
            "Heavier than aluminum",
        ],
        "applications": "Residential wiring, commercial buildings, sensitive equipment",
    },
    "aluminum": {
        "name": "Aluminum Conductor",
        "description": "Lightweight conductor alternative to copper.",
        "conductivity": "35 MS/m",
        "temperature": "90°C max operating temperature",
        "advantages": [
            "Lower cost",
            "Lighter weight",
            "Good for large conductors",
        ],
        "disadvantages": [
            "Lower conductivity",
            "Oxidation issues",
            "Requires larger size for same current",
        ],
        "applications": "Power transmission, large feeders, overhead lines",
    },
}

def get_material_info(key) -> dict:
    """Looks up a material by enum or name, case-insensitive. Raises KeyError if unknown."""
    key = str(getattr(key, "value", key)).strip()
    for name, info in MATERIALS.items():
        if name.lower() == key.lower():
            return info
    raise KeyError(f"Unknown material: {key}")

def format_material_info(key) -> str:
    info = get_material_info(key)
    lines = [info["name"], info["description"], info["temperature"]]
    if "conductivity" in info:
        lines.append(f"Conductivity: {info['conductivity']}")
    lines.append("Advantages: " + ", ".join(info["advantages"]))
    lines.append("Disadvantages: " + ", ".join(info["disadvantages"]))
    lines.append(f"Typical applications: {info['applications']}")
    return "\n".join(lines)
