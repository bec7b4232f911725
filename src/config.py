# Backing file of enrolled identities (JSON array, rewritten on every enrollment).
DATABASE = "./face_data.json"

# Cosine similarity must be strictly greater than this to count as a known face.
MATCH_THRESHOLD = 0.9

# Answers accepted as "grant access" from a free-text decision source.
# "j" is kept for compatibility with the German prompt (j/n) of earlier releases.
AFFIRMATIVE_ANSWERS = ("j", "ja", "y", "yes")

# On-disk field names. Changing them breaks files written by earlier runs.
FIELD_ID = "id"
FIELD_EMBEDDING = "features"
FIELD_DECISION = "allowed"
