"""
Profile Repository - Data Access Layer
"""
from typing import Optional
from sqlalchemy.orm import Session

from bakery.models.profile import Profile


class ProfileRepository:
    """Repository for Profile CRUD operations"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get_by_id(self, profile_id: str) -> Optional[Profile]:
        """Get profile by auth user ID"""
        return self.db.query(Profile).filter(Profile.id == profile_id).first()
    
    def get_role(self, profile_id: str) -> Optional[str]:
        """Read only the role column"""
        row = self.db.query(Profile.role).filter(Profile.id == profile_id).first()
        return row[0] if row else None
    
    def create(self, profile_data: dict) -> Profile:
        """Create new profile"""
        profile = Profile(**profile_data)
        self.db.add(profile)
        self.db.commit()
        self.db.refresh(profile)
        return profile
    
    def update(self, profile_id: str, profile_data: dict) -> Optional[Profile]:
        """Update only the provided fields"""
        profile = self.get_by_id(profile_id)
        if not profile:
            return None
        
        for field, value in profile_data.items():
            setattr(profile, field, value)
        
        self.db.commit()
        self.db.refresh(profile)
        return profile
    
    def set_role(self, profile_id: str, role: str) -> Optional[Profile]:
        return self.update(profile_id, {"role": role})
