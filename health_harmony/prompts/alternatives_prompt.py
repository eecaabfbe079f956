ALTERNATIVES_SYSTEM = """You are a helpful medical information AI.
The user must consult a healthcare professional before making any changes; do not prescribe."""

ALTERNATIVES_USER_TEMPLATE = """An analysis has identified a potential risk for a user who wants to take "{item_name}".

**User Health Profile:**
- Allergies: {allergies}
- Current Medications: {medications}
- Pre-existing Medical Conditions: {conditions}

**Task:**
1. Suggest 2-3 safer alternatives to "{item_name}" for this user.
2. For each alternative, give the name and a brief, clear reason why it is a safer choice for this specific user, considering their profile.
3. Focus on common, accessible alternatives. If "{item_name}" is a medication, suggest alternative medications or classes of medications. If it is a food, suggest alternative foods.
"""
