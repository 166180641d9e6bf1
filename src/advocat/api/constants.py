CASE_CATEGORIES = [
    {"id": "contract", "label": "Contract / Agreement"},
    {"id": "property", "label": "Property / Real Estate"},
    {"id": "family", "label": "Family / Matrimonial"},
    {"id": "consumer", "label": "Consumer Dispute"},
    {"id": "tort", "label": "Civil Wrong / Damages"},
    {"id": "debt", "label": "Debt Recovery"},
    {"id": "cheque-bounce", "label": "Cheque Bounce (NI Act)"},
    {"id": "other", "label": "Other Civil Matter"},
]

EVIDENCE_TYPES = [
    {"id": "document", "label": "Document"},
    {"id": "photo", "label": "Photo / Video"},
    {"id": "testimony", "label": "Testimony (self or other)"},
    {"id": "other", "label": "Other"},
]

INDIAN_STATES = [
    {"name": "Andhra Pradesh", "capital": "Amaravati"},
    {"name": "Arunachal Pradesh", "capital": "Itanagar"},
    {"name": "Assam", "capital": "Dispur"},
    {"name": "Bihar", "capital": "Patna"},
    {"name": "Chhattisgarh", "capital": "Raipur"},
    {"name": "Goa", "capital": "Panaji"},
    {"name": "Gujarat", "capital": "Gandhinagar"},
    {"name": "Haryana", "capital": "Chandigarh"},
    {"name": "Himachal Pradesh", "capital": "Shimla (Summer), Dharamshala (Winter)"},
    {"name": "Jharkhand", "capital": "Ranchi"},
    {"name": "Karnataka", "capital": "Bengaluru"},
    {"name": "Kerala", "capital": "Thiruvananthapuram"},
    {"name": "Madhya Pradesh", "capital": "Bhopal"},
    {"name": "Maharashtra", "capital": "Mumbai (Summer), Nagpur (Winter)"},
    {"name": "Manipur", "capital": "Imphal"},
    {"name": "Meghalaya", "capital": "Shillong"},
    {"name": "Mizoram", "capital": "Aizawl"},
    {"name": "Nagaland", "capital": "Kohima"},
    {"name": "Odisha", "capital": "Bhubaneswar"},
    {"name": "Punjab", "capital": "Chandigarh"},
    {"name": "Rajasthan", "capital": "Jaipur"},
    {"name": "Sikkim", "capital": "Gangtok"},
    {"name": "Tamil Nadu", "capital": "Chennai"},
    {"name": "Telangana", "capital": "Hyderabad"},
    {"name": "Tripura", "capital": "Agartala"},
    {"name": "Uttar Pradesh", "capital": "Lucknow"},
    {"name": "Uttarakhand", "capital": "Bhararisain (Summer), Dehradun (Winter)"},
    {"name": "West Bengal", "capital": "Kolkata"},
    {"name": "Andaman and Nicobar Islands", "capital": "Port Blair"},
    {"name": "Chandigarh", "capital": "Chandigarh"},
    {"name": "Dadra and Nagar Haveli and Daman and Diu", "capital": "Daman"},
    {"name": "Delhi", "capital": "New Delhi"},
    {"name": "Jammu and Kashmir", "capital": "Srinagar (Summer), Jammu (Winter)"},
    {"name": "Ladakh", "capital": "Leh"},
    {"name": "Lakshadweep", "capital": "Kavaratti"},
    {"name": "Puducherry", "capital": "Pondicherry"},
]

INTAKE_STEPS = ["Basics", "Facts", "Evidence", "Analysis"]
