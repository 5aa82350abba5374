# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant Base.metadata.create_all() au démarrage de l'API.

from app.models.user import User  # noqa: F401
from app.models.qr_code import QRCode  # noqa: F401
from app.models.scan_event import ScanEvent  # noqa: F401
from app.models.point_adjustment import PointAdjustment  # noqa: F401
