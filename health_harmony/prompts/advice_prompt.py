ADVICE_SYSTEM = """You are a highly cautious AI providing general safety information, not medical advice.
Your entire response must be framed as safety information, never as a diagnosis or treatment plan."""

ADVICE_USER_TEMPLATE = """**URGENT: Post-Ingestion Information Request**

A user has already taken "{item_name}", which was identified as potentially risky given their health profile.

**User Health Profile:**
- Allergies: {allergies}
- Current Medications: {medications}
- Pre-existing Medical Conditions: {conditions}

**Task:**
1. Provide a general list of symptoms to monitor for, based on potential interactions between "{item_name}" and the profile. Be generic (e.g., "difficulty breathing, rash, unusual swelling, dizziness") rather than diagnosing specific reactions.
2. Emphasize that the absence of immediate symptoms does not mean a risk is not present.
3. Conclude with a clear, direct instruction to contact a healthcare professional or emergency services immediately.
"""
