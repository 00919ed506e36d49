# models_bootstrap.py
from user import models as _user_models
from shift import models as _shift_models
