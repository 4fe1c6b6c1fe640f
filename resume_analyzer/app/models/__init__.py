from resume_analyzer.app.models.user import User
from resume_analyzer.app.models.user_session import UserSession
from resume_analyzer.app.models.resume import Resume
from resume_analyzer.app.models.kv_entry import KVEntry
from resume_analyzer.app.models.payment import Payment
