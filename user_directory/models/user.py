"""User models for the user directory."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Geo:
    """Geographical coordinates, kept as strings like the backend does."""

    lat: str
    lng: str

    def to_dict(self) -> Dict[str, Any]:
        return {'lat': self.lat, 'lng': self.lng}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Geo':
        return cls(lat=str(data.get('lat', '')), lng=str(data.get('lng', '')))


@dataclass
class Address:
    """Postal address of a user."""

    street: str
    suite: str
    city: str
    zipcode: str
    geo: Geo

    def format(self) -> str:
        """Format the address as a single display line."""
        return f"{self.suite}, {self.street}, {self.city}, {self.zipcode}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'street': self.street,
            'suite': self.suite,
            'city': self.city,
            'zipcode': self.zipcode,
            'geo': self.geo.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Address':
        return cls(
            street=data.get('street', ''),
            suite=data.get('suite', ''),
            city=data.get('city', ''),
            zipcode=data.get('zipcode', ''),
            geo=Geo.from_dict(data.get('geo') or {})
        )


@dataclass
class Company:
    """Company a user works for."""

    name: str
    catch_phrase: str = ''
    bs: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'catchPhrase': self.catch_phrase, 'bs': self.bs}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Company':
        return cls(
            name=data.get('name', ''),
            catch_phrase=data.get('catchPhrase', ''),
            bs=data.get('bs', '')
        )


@dataclass
class DisplayUser:
    """Flattened user row shown in the directory table."""

    id: str
    name: str
    email: str
    address: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'email': self.email, 'address': self.address}


@dataclass
class User:
    """Represents a user record stored by the backend."""

    id: str
    name: str
    username: str
    email: str
    address: Address
    phone: str = ''
    website: str = ''
    company: Company = field(default_factory=lambda: Company(name=''))
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert user to its wire representation."""
        result = {
            'id': self.id,
            'name': self.name,
            'username': self.username,
            'email': self.email,
            'address': self.address.to_dict(),
            'phone': self.phone,
            'website': self.website,
            'company': self.company.to_dict()
        }
        if self.created_at is not None:
            result['createdAt'] = self.created_at
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        """Create User instance from its wire representation; integer ids become strings."""
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            username=data.get('username', ''),
            email=data.get('email', ''),
            address=Address.from_dict(data.get('address') or {}),
            phone=data.get('phone', ''),
            website=data.get('website', ''),
            company=Company.from_dict(data.get('company') or {}),
            created_at=data.get('createdAt')
        )

    def to_display(self) -> DisplayUser:
        return DisplayUser(id=self.id, name=self.name, email=self.email, address=self.address.format())

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, name={self.name!r}, email={self.email!r})"


@dataclass
class UserForm:
    """Flat form input used to create or update a user."""

    name: str = ''
    username: str = ''
    email: str = ''
    street: str = ''
    suite: str = ''
    city: str = ''
    zipcode: str = ''
    phone: str = ''
    website: str = ''
    company_name: str = ''
    catch_phrase: str = ''
    bs: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'username': self.username,
            'email': self.email,
            'street': self.street,
            'suite': self.suite,
            'city': self.city,
            'zipcode': self.zipcode,
            'phone': self.phone,
            'website': self.website,
            'company_name': self.company_name,
            'catch_phrase': self.catch_phrase,
            'bs': self.bs
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserForm':
        """Create a form from submitted fields, accepting camelCase company keys."""
        return cls(
            name=data.get('name', ''),
            username=data.get('username', ''),
            email=data.get('email', ''),
            street=data.get('street', ''),
            suite=data.get('suite', ''),
            city=data.get('city', ''),
            zipcode=data.get('zipcode', ''),
            phone=data.get('phone', ''),
            website=data.get('website', ''),
            company_name=data.get('company_name', data.get('companyName', '')),
            catch_phrase=data.get('catch_phrase', data.get('catchPhrase', '')),
            bs=data.get('bs', '')
        )

    def to_user(self, user_id: str, geo: Geo, created_at: str) -> User:
        """Build the user record submitted to the backend."""
        return User(
            id=user_id,
            name=self.name.strip(),
            username=self.username.strip(),
            email=self.email.strip(),
            address=Address(
                street=self.street.strip(),
                suite=self.suite.strip(),
                city=self.city.strip(),
                zipcode=self.zipcode.strip(),
                geo=geo
            ),
            phone=self.phone.strip(),
            website=self.website.strip(),
            company=Company(name=self.company_name.strip(), catch_phrase=self.catch_phrase.strip(), bs=self.bs.strip()),
            created_at=created_at
        )
