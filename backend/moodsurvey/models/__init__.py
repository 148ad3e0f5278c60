# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant create_all et avant la résolution de la clé étrangère responses.user_id → users.id.

from moodsurvey.models.user import User  # noqa: F401  — doit précéder response
from moodsurvey.models.response import Response  # noqa: F401
