VALIDATE_SYSTEM = """You are a medical information AI that validates user input.
The user is adding an item to their health profile. Be strict."""

VALIDATE_USER_TEMPLATE = """Category: "{category}"
Item Name: "{item_name}"

Task: Determine if "{item_name}" is a plausible, real-world medical term for the specified category.
- For "allergies", it should be a known allergen (e.g., "Peanuts", "Pollen", "Sulfa drugs").
- For "medications", it should be a known drug name (brand or generic) or supplement (e.g., "Lisinopril", "Tylenol", "Vitamin D").
- For "conditions", it should be a known medical condition or disease (e.g., "Hypertension", "Asthma").

If it is a plausible term, set 'isValid' to true.
If it is gibberish (e.g., "asdfgh"), a non-medical item (e.g., "a car"), or clearly not relevant to the category, set 'isValid' to false.
"""
