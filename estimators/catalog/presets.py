"""
Built-in asset category tables (AEAT official depreciation tables).

Keyed by tax regime. Each record gives the maximum annual rate and the
maximum period for one category; ``allows_incentive`` marks categories
eligible for the eco-vehicle incentives.
"""

REQUIRED_REGIMES = ("directa_normal", "directa_simplificada", "objetiva")

_DIRECT_ESTIMATION_VEHICLES = [
    {
        "id": "veh_turismo",
        "family": "Vehículos",
        "name": "Turismo / Vehículo ligero",
        "max_rate_percent": 16,
        "max_period_years": 14,
        "allows_incentive": True,
    },
    {
        "id": "veh_mixto",
        "family": "Vehículos",
        "name": "Mixto para mercancías",
        "max_rate_percent": 16,
        "max_period_years": 14,
        "allows_incentive": True,
    },
    {
        "id": "veh_furgoneta",
        "family": "Vehículos",
        "name": "Furgoneta",
        "max_rate_percent": 16,
        "max_period_years": 14,
        "allows_incentive": True,
    },
    {
        "id": "veh_trans_personas",
        "family": "Vehículos",
        "name": "Transporte de personas (taxi/VTC/bus)",
        "max_rate_percent": 16,
        "max_period_years": 14,
        "allows_incentive": True,
    },
    {
        "id": "veh_ensenanza",
        "family": "Vehículos",
        "name": "Enseñanza de conducción",
        "max_rate_percent": 16,
        "max_period_years": 14,
        "allows_incentive": True,
    },
    {
        "id": "veh_autocamion",
        "family": "Vehículos",
        "name": "Autocamión",
        "max_rate_percent": 20,
        "max_period_years": 10,
        "allows_incentive": True,
    },
    {
        "id": "inf_equipos",
        "family": "Informática",
        "name": "Equipos para procesos de información",
        "max_rate_percent": 25,
        "max_period_years": 8,
        "allows_incentive": False,
    },
    {
        "id": "inf_software",
        "family": "Informática",
        "name": "Sistemas y programas informáticos",
        "max_rate_percent": 33,
        "max_period_years": 6,
        "allows_incentive": False,
    },
    {
        "id": "mob_mobiliario",
        "family": "Mobiliario",
        "name": "Mobiliario",
        "max_rate_percent": 10,
        "max_period_years": 20,
        "allows_incentive": False,
    },
]

PRESET_CATALOG = {
    "directa_normal": _DIRECT_ESTIMATION_VEHICLES,
    "directa_simplificada": _DIRECT_ESTIMATION_VEHICLES,
    "objetiva": [
        {
            "id": "veh_generico_obj",
            "family": "Vehículos",
            "name": "Elementos de transporte (Objetiva)",
            "max_rate_percent": 25,
            "max_period_years": 8,
            "allows_incentive": True,
        },
    ],
}
