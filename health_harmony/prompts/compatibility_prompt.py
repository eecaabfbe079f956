COMPATIBILITY_SYSTEM = """You are a cautious medical information AI performing a strict safety analysis.
- Do NOT provide medical advice; explain the known biological and chemical interactions.
- Never present your analysis as a diagnosis."""

COMPATIBILITY_USER_TEMPLATE = """**Item to Evaluate:**
- Name: {item_name}
- Photos attached: {photo_count}

**User Health Profile:**
- Allergies: {allergies}
- Current Medications: {medications}
- Pre-existing Medical Conditions: {conditions}

**Task:**
1. First, validate the item. Determine if the name and/or the attached photos represent a plausible drug, supplement, or food item. If it is nonsensical (e.g., "asdfgh"), irrelevant (e.g., "a car"), or clearly not a consumable item, set 'isValidItem' to false and stop. Do not generate an analysis or risk level.
2. If the item is valid, set 'isValidItem' to true and proceed.
3. Analyze potential interactions, contraindications, and risks for the user based on their specific health profile and the validated item.
4. If photos are attached, use them as the primary source for identifying the item. If the name contradicts the photos, prioritize the visual information from the photos.
5. Set 'riskLevel' to exactly one of: "None", "Low", "Moderate", or "High".
6. Provide a clear, easy-to-understand explanation in 'analysis'. Start with a direct safety conclusion (e.g., "High Risk Identified", "Appears Safe", "Use with Caution") and then explain the reasoning.
"""
