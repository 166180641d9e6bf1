from advocat.api.routes.auth import auth_bp
from advocat.api.routes.chat import chat_bp
from advocat.api.routes.cases import cases_bp
from advocat.api.routes.intake import intake_bp
from advocat.api.routes.monitoring import monitoring_bp

__all__ = ['auth_bp', 'chat_bp', 'cases_bp', 'intake_bp', 'monitoring_bp']
