# deployhook/models.py
from .extensions import db


class BuildInfo(db.Model):
    __tablename__ = "build_info"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    date = db.Column(db.Text, nullable=False)
    data = db.Column(db.Text, nullable=False)

    def to_dict(self):
        return {"Id": self.id, "Date": self.date, "Data": self.data}

    def __repr__(self):
        return f"<BuildInfo id={self.id} date={self.date}>"
