"""
config/recommendations.py
─────────────────────────
Agronomic recommendation text per channel, status and breach direction.

Layout:
  RECOMMENDATIONS[channel]["optimal"]            → str
  RECOMMENDATIONS[channel]["warning"][direction] → str   (direction: "low" | "high")
  RECOMMENDATIONS[channel]["critical"][direction]→ str
"""

RECOMMENDATIONS: dict[str, dict] = {
    "temperature": {
        "optimal": "Maintain current ventilation and shading. Conditions support strong metabolic activity.",
        "warning": {
            "low": "Apply row covers or black plastic mulch to retain heat. Monitor overnight minimums.",
            "high": "Increase airflow, apply reflective mulch, and consider shade netting during peak afternoon hours.",
        },
        "critical": {
            "low": "Frost risk is present. Deploy emergency frost blankets and activate any heating infrastructure immediately.",
            "high": "Heat stress exceeds critical threshold. Activate cooling misting, maximise shade coverage, and increase irrigation.",
        },
    },
    "humidity": {
        "optimal": "Humidity supports healthy transpiration. Maintain current irrigation and ventilation schedule.",
        "warning": {
            "low": "Low humidity is elevating transpiration stress. Consider overhead misting or shade cloth.",
            "high": "Elevated humidity increases fungal risk. Improve inter-row airflow and reduce evening irrigation.",
        },
        "critical": {
            "low": "Critically low humidity. Activate emergency misting and review irrigation schedule.",
            "high": "Critically high humidity — apply preventative fungicide, ventilate immediately, and suspend irrigation.",
        },
    },
    "moisture": {
        "optimal": "Soil moisture is at field capacity. Continue current irrigation cycle.",
        "warning": {
            "low": "Moisture declining — schedule a 20-minute drip irrigation run within the next 8 hours.",
            "high": "Trending toward over-saturation. Skip one irrigation cycle and inspect drainage capacity.",
        },
        "critical": {
            "low": "Soil is approaching wilting point. Begin emergency irrigation immediately and check for drip blockages.",
            "high": "Waterlogged conditions detected. Stop all irrigation, open drainage channels, and apply protective fungicide.",
        },
    },
    "ph": {
        "optimal": "pH is ideal for nutrient availability. Maintain current soil amendment schedule.",
        "warning": {
            "low": "Slightly acidic — apply agricultural lime at 50 kg/ha to nudge pH upward.",
            "high": "Slightly alkaline — incorporate elemental sulfur at 30 kg/ha or switch to acidifying NPK blends.",
        },
        "critical": {
            "low": "Critically acidic soil will cause aluminium toxicity. Apply lime at 200 kg/ha urgently and retest in 48 hours.",
            "high": "Critically alkaline — micronutrient lockout is imminent. Apply gypsum and acidifying amendments without delay.",
        },
    },
}
