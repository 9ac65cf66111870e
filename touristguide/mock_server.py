# touristguide/mock_server.py
"""
Mock-бэкенд справочника на aiohttp.web.

Хранит всё в памяти и повторяет контракт REST API, включая его причуды
(голая строка вместо JSON и пустое тело), которые включаются через `quirks`.
Используется в интеграционных тестах и для локальной разработки.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set

from aiohttp import web

logger = logging.getLogger("MockServer")

# Причуды бэкенда
APPROVE_BARE_STRING = "approve_bare_string"
APPROVE_EMPTY_BODY = "approve_empty_body"
APPROVE_ERROR_STRING = "approve_error_string"
PLACES_BARE_STRING = "places_bare_string"
PENDING_BARE_STRING = "pending_bare_string"

ADMIN_EMAIL = "admin@touristguide.in"
ADMIN_PASSWORD = "admin123"

CATEGORIES = [
    {"name": "Heritage", "icon": "🏛", "description": "Forts, temples and old houses"},
    {"name": "Food", "icon": "🍛", "description": "Street food and restaurants"},
    {"name": "Parks", "icon": "🌳", "description": "Gardens and riverfront"},
]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex[:24]


def _ok(data: Any = None, message: Optional[str] = None, status: int = 200, **extra) -> web.Response:
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return web.json_response(body, status=status)


def _fail(status: int, message: str) -> web.Response:
    return web.json_response({"success": False, "message": message}, status=status)


class MockBackend:
    """In-memory реализация API справочника"""

    def __init__(self, quirks: Optional[Iterable[str]] = None):
        self.quirks: Set[str] = set(quirks or [])
        self.users: Dict[str, Dict[str, Any]] = {}
        self.tokens: Dict[str, str] = {}
        self.categories: Dict[str, Dict[str, Any]] = {}
        self.places: Dict[str, Dict[str, Any]] = {}
        self.likes: Dict[str, Set[str]] = {}
        self.reviews: Dict[str, Dict[str, Any]] = {}
        self.admin_id = self.add_user("Admin", ADMIN_EMAIL, ADMIN_PASSWORD, role="admin")
        for category in CATEGORIES:
            self.add_category(**category)

    # --- Наполнение ---
    def add_user(self, name: str, email: str, password: str, role: str = "user") -> str:
        user_id = _new_id()
        self.users[user_id] = {
            "_id": user_id,
            "name": name,
            "email": email.lower(),
            "password": password,
            "role": role,
            "likedPlaces": [],
            "createdAt": _now(),
            "lastLogin": None,
        }
        return user_id

    def add_category(self, name: str, icon: Optional[str] = None, description: Optional[str] = None) -> str:
        category_id = _new_id()
        self.categories[category_id] = {
            "_id": category_id,
            "name": name,
            "icon": icon,
            "description": description,
            "isActive": True,
        }
        return category_id

    def add_place(
        self,
        name: str,
        category_id: str,
        added_by: str,
        approved: bool = False,
        location: str = "Surat",
        city: str = "Surat",
        description: str = "",
        link: Optional[str] = None,
        images: Optional[List[str]] = None,
    ) -> str:
        place_id = _new_id()
        self.places[place_id] = {
            "_id": place_id,
            "name": name,
            "location": location,
            "city": city,
            "description": description,
            "images": list(images or []),
            "link": link,
            "category": category_id,
            "addedBy": added_by,
            "isApproved": approved,
            "approvedBy": self.admin_id if approved else None,
            "approvedAt": _now() if approved else None,
            "createdAt": _now(),
        }
        self.likes[place_id] = set()
        return place_id

    def category_id(self, name: str) -> str:
        return next(c["_id"] for c in self.categories.values() if c["name"] == name)

    # --- Сериализация ---
    def _public_user(self, user_id: Optional[str]) -> Optional[Dict[str, Any]]:
        user = self.users.get(user_id) if user_id else None
        if user is None:
            return None
        return {k: v for k, v in user.items() if k != "password"}

    def _place_reviews(self, place_id: str) -> List[Dict[str, Any]]:
        return [r for r in self.reviews.values() if r["place"] == place_id]

    def _place_json(self, place: Dict[str, Any], viewer: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        reviews = self._place_reviews(place["_id"])
        average = round(sum(r["rating"] for r in reviews) / len(reviews), 1) if reviews else 0.0
        is_owner = viewer is not None and viewer["_id"] == place["addedBy"]
        is_admin = viewer is not None and viewer["role"] == "admin"
        data = dict(place)
        data.update({
            "category": self.categories.get(place["category"], {"_id": place["category"], "name": ""}),
            "addedBy": self._public_user(place["addedBy"]),
            "likesCount": len(self.likes.get(place["_id"], ())),
            "reviewsCount": len(reviews),
            "averageRating": average,
            "permissions": {
                "canEdit": is_owner or is_admin,
                "canDelete": is_owner or is_admin,
                "isOwner": is_owner,
                "isAdmin": is_admin,
            },
        })
        return data

    def _review_json(self, review: Dict[str, Any]) -> Dict[str, Any]:
        data = dict(review)
        data["user"] = self._public_user(review["user"])
        return data

    # --- Авторизация ---
    @web.middleware
    async def auth_middleware(self, request: web.Request, handler):
        request["user"] = None
        header = request.headers.get("Authorization", "")
        if header.startswith("Bearer "):
            user_id = self.tokens.get(header[len("Bearer "):])
            request["user"] = self.users.get(user_id) if user_id else None
        return await handler(request)

    def _issue_token(self, user: Dict[str, Any]) -> Dict[str, Any]:
        token = uuid.uuid4().hex
        self.tokens[token] = user["_id"]
        user["lastLogin"] = _now()
        return {
            "id": user["_id"],
            "name": user["name"],
            "email": user["email"],
            "role": user["role"],
            "token": token,
        }

    async def register(self, request: web.Request) -> web.Response:
        body = await request.json()
        name, email, password = body.get("name"), (body.get("email") or "").lower(), body.get("password")
        if not name or not email or not password:
            return _fail(400, "Please provide name, email and password")
        if any(u["email"] == email for u in self.users.values()):
            return _fail(400, "User already exists")
        user_id = self.add_user(name, email, password)
        return _ok(self._issue_token(self.users[user_id]), "User registered successfully", status=201)

    async def login(self, request: web.Request) -> web.Response:
        body = await request.json()
        email = (body.get("email") or "").lower()
        user = next((u for u in self.users.values() if u["email"] == email), None)
        if user is None or user["password"] != body.get("password"):
            return _fail(401, "Invalid credentials")
        return _ok(self._issue_token(user), "Login successful")

    async def me(self, request: web.Request) -> web.Response:
        if request["user"] is None:
            return _fail(401, "Not authorized")
        return _ok(self._public_user(request["user"]["_id"]))

    async def logout(self, request: web.Request) -> web.Response:
        header = request.headers.get("Authorization", "")
        self.tokens.pop(header[len("Bearer "):], None)
        return _ok(message="Logged out")

    # --- Места ---
    async def list_places(self, request: web.Request) -> web.Response:
        if PLACES_BARE_STRING in self.quirks:
            return web.Response(text="OK", content_type="text/plain")
        category = request.query.get("category")
        city = request.query.get("city")
        search = (request.query.get("search") or "").lower()
        places = []
        for place in self.places.values():
            if not place["isApproved"]:
                continue
            if category and place["category"] != category:
                continue
            if city and place["city"].lower() != city.lower():
                continue
            haystack = " ".join([place["name"], place["location"], place["description"]]).lower()
            if search and search not in haystack:
                continue
            places.append(self._place_json(place, request["user"]))
        return _ok(places, count=len(places))

    async def my_places(self, request: web.Request) -> web.Response:
        user = request["user"]
        if user is None:
            return _fail(401, "Not authorized")
        places = [self._place_json(p, user) for p in self.places.values() if p["addedBy"] == user["_id"]]
        return _ok(places, count=len(places))

    async def pending_places(self, request: web.Request) -> web.Response:
        user = request["user"]
        if user is None or user["role"] != "admin":
            return _fail(403, "Admin access required")
        if PENDING_BARE_STRING in self.quirks:
            return web.Response(text="No pending places", content_type="text/plain")
        places = [self._place_json(p, user) for p in self.places.values() if not p["isApproved"]]
        return _ok(places, count=len(places))

    async def get_place(self, request: web.Request) -> web.Response:
        place = self.places.get(request.match_info["id"])
        user = request["user"]
        if place is None:
            return _fail(404, "Place not found")
        if not place["isApproved"]:
            if user is None or (user["role"] != "admin" and user["_id"] != place["addedBy"]):
                return _fail(404, "Place not found")
        return _ok(self._place_json(place, user))

    async def _place_fields(self, request: web.Request) -> Dict[str, Any]:
        form = await request.post()
        fields: Dict[str, Any] = {}
        for key in ("name", "location", "city", "description", "category", "link"):
            if key in form:
                fields[key] = str(form[key])
        images = []
        for part in form.getall("images", []):
            filename = getattr(part, "filename", None)
            if filename:
                images.append(f"/uploads/{_new_id()}-{filename}")
        if images:
            fields["images"] = images
        return fields

    async def create_place(self, request: web.Request) -> web.Response:
        user = request["user"]
        if user is None:
            return _fail(401, "Not authorized")
        fields = await self._place_fields(request)
        missing = [k for k in ("name", "location", "description", "category") if not fields.get(k)]
        if missing:
            return _fail(400, f"Missing fields: {', '.join(missing)}")
        if fields["category"] not in self.categories:
            return _fail(400, "Invalid category")
        place_id = self.add_place(
            name=fields["name"],
            category_id=fields["category"],
            added_by=user["_id"],
            location=fields["location"],
            city=fields.get("city") or "Surat",
            description=fields["description"],
            link=fields.get("link"),
            images=fields.get("images"),
        )
        return _ok(
            self._place_json(self.places[place_id], user),
            "Place submitted for approval",
            status=201,
        )

    def _can_manage(self, user: Optional[Dict[str, Any]], place: Dict[str, Any]) -> bool:
        return user is not None and (user["role"] == "admin" or user["_id"] == place["addedBy"])

    async def update_place(self, request: web.Request) -> web.Response:
        place = self.places.get(request.match_info["id"])
        user = request["user"]
        if place is None:
            return _fail(404, "Place not found")
        if not self._can_manage(user, place):
            return _fail(403, "Not allowed to edit this place")
        fields = await self._place_fields(request)
        if "category" in fields and fields["category"] not in self.categories:
            return _fail(400, "Invalid category")
        place.update({k: v for k, v in fields.items() if v})
        return _ok(self._place_json(place, user), "Place updated successfully")

    async def delete_place(self, request: web.Request) -> web.Response:
        place_id = request.match_info["id"]
        place = self.places.get(place_id)
        user = request["user"]
        if place is None:
            return _fail(404, "Place not found")
        if not self._can_manage(user, place):
            return _fail(403, "Not allowed to delete this place")
        del self.places[place_id]
        self.likes.pop(place_id, None)
        for review_id in [r["_id"] for r in self._place_reviews(place_id)]:
            del self.reviews[review_id]
        return _ok(message="Place deleted successfully")

    async def approve_place(self, request: web.Request) -> web.Response:
        user = request["user"]
        if user is None or user["role"] != "admin":
            return _fail(403, "Admin access required")
        place = self.places.get(request.match_info["id"])
        if place is None:
            return _fail(404, "Place not found")
        if APPROVE_ERROR_STRING in self.quirks:
            return web.Response(text="Internal error while approving", content_type="text/plain")
        place.update({"isApproved": True, "approvedBy": user["_id"], "approvedAt": _now()})
        if APPROVE_BARE_STRING in self.quirks:
            return web.Response(text="Place approved successfully", content_type="text/plain")
        if APPROVE_EMPTY_BODY in self.quirks:
            return web.Response(status=200)
        return _ok(self._place_json(place, user), "Place approved successfully")

    # --- Категории ---
    async def list_categories(self, request: web.Request) -> web.Response:
        categories = [c for c in self.categories.values() if c["isActive"]]
        return _ok(categories, count=len(categories))

    async def create_category(self, request: web.Request) -> web.Response:
        user = request["user"]
        if user is None or user["role"] != "admin":
            return _fail(403, "Admin access required")
        body = await request.json()
        if not body.get("name"):
            return _fail(400, "Category name is required")
        category_id = self.add_category(body["name"], body.get("icon"), body.get("description"))
        return _ok(self.categories[category_id], "Category created", status=201)

    # --- Лайки ---
    async def toggle_like(self, request: web.Request) -> web.Response:
        user = request["user"]
        if user is None:
            return _fail(401, "Not authorized")
        place_id = request.match_info["place_id"]
        if place_id not in self.places:
            return _fail(404, "Place not found")
        likers = self.likes.setdefault(place_id, set())
        if user["_id"] in likers:
            likers.discard(user["_id"])
            user["likedPlaces"].remove(place_id)
            message = "Place unliked"
        else:
            likers.add(user["_id"])
            user["likedPlaces"].append(place_id)
            message = "Place liked"
        return _ok({"isLiked": user["_id"] in likers, "likesCount": len(likers)}, message)

    async def liked_places(self, request: web.Request) -> web.Response:
        user = request["user"]
        if user is None:
            return _fail(401, "Not authorized")
        places = [self._place_json(self.places[p], user) for p in user["likedPlaces"] if p in self.places]
        return _ok(places, count=len(places))

    async def like_status(self, request: web.Request) -> web.Response:
        user = request["user"]
        if user is None:
            return _fail(401, "Not authorized")
        place_id = request.match_info["place_id"]
        likers = self.likes.get(place_id, set())
        return _ok({"isLiked": user["_id"] in likers, "likesCount": len(likers)})

    # --- Отзывы ---
    async def list_reviews(self, request: web.Request) -> web.Response:
        place_id = request.match_info["place_id"]
        reviews = [self._review_json(r) for r in self._place_reviews(place_id)]
        return _ok(reviews, count=len(reviews))

    @staticmethod
    def _review_input(body: Dict[str, Any]) -> Optional[str]:
        rating = body.get("rating")
        if not isinstance(rating, int) or not 1 <= rating <= 5:
            return "Rating must be between 1 and 5"
        if not (body.get("comment") or "").strip():
            return "Comment is required"
        return None

    async def add_review(self, request: web.Request) -> web.Response:
        user = request["user"]
        if user is None:
            return _fail(401, "Not authorized")
        place_id = request.match_info["place_id"]
        if place_id not in self.places:
            return _fail(404, "Place not found")
        body = await request.json()
        error = self._review_input(body)
        if error:
            return _fail(400, error)
        if any(r["user"] == user["_id"] for r in self._place_reviews(place_id)):
            return _fail(400, "You have already reviewed this place")
        review_id = _new_id()
        self.reviews[review_id] = {
            "_id": review_id,
            "place": place_id,
            "user": user["_id"],
            "rating": body["rating"],
            "comment": body["comment"].strip(),
            "createdAt": _now(),
        }
        return _ok(self._review_json(self.reviews[review_id]), "Review added", status=201)

    async def update_review(self, request: web.Request) -> web.Response:
        user = request["user"]
        review = self.reviews.get(request.match_info["review_id"])
        if review is None:
            return _fail(404, "Review not found")
        if user is None or user["_id"] != review["user"]:
            return _fail(403, "Not allowed to update this review")
        body = await request.json()
        error = self._review_input(body)
        if error:
            return _fail(400, error)
        review.update({"rating": body["rating"], "comment": body["comment"].strip()})
        return _ok(self._review_json(review), "Review updated")

    async def delete_review(self, request: web.Request) -> web.Response:
        user = request["user"]
        review_id = request.match_info["review_id"]
        review = self.reviews.get(review_id)
        if review is None:
            return _fail(404, "Review not found")
        if user is None or user["_id"] != review["user"]:
            return _fail(403, "Not allowed to delete this review")
        del self.reviews[review_id]
        return _ok(message="Review deleted")

    def make_app(self, prefix: str = "/api") -> web.Application:
        app = web.Application(middlewares=[self.auth_middleware])
        app.router.add_post(f"{prefix}/auth/register", self.register)
        app.router.add_post(f"{prefix}/auth/login", self.login)
        app.router.add_get(f"{prefix}/auth/me", self.me)
        app.router.add_post(f"{prefix}/auth/logout", self.logout)
        # Статические пути раньше /places/{id}
        app.router.add_get(f"{prefix}/places/pending", self.pending_places)
        app.router.add_get(f"{prefix}/places/user/my-places", self.my_places)
        app.router.add_get(f"{prefix}/places", self.list_places)
        app.router.add_post(f"{prefix}/places", self.create_place)
        app.router.add_get(f"{prefix}/places/{{id}}", self.get_place)
        app.router.add_put(f"{prefix}/places/{{id}}", self.update_place)
        app.router.add_delete(f"{prefix}/places/{{id}}", self.delete_place)
        app.router.add_put(f"{prefix}/places/{{id}}/approve", self.approve_place)
        app.router.add_get(f"{prefix}/categories", self.list_categories)
        app.router.add_post(f"{prefix}/categories", self.create_category)
        app.router.add_get(f"{prefix}/likes", self.liked_places)
        app.router.add_post(f"{prefix}/likes/{{place_id}}", self.toggle_like)
        app.router.add_get(f"{prefix}/likes/{{place_id}}/status", self.like_status)
        app.router.add_get(f"{prefix}/reviews/{{place_id}}", self.list_reviews)
        app.router.add_post(f"{prefix}/reviews/{{place_id}}", self.add_review)
        app.router.add_put(f"{prefix}/reviews/{{review_id}}", self.update_review)
        app.router.add_delete(f"{prefix}/reviews/{{review_id}}", self.delete_review)
        return app


def run(host: str = "localhost", port: int = 5000, quirks: Optional[Iterable[str]] = None) -> None:
    backend = MockBackend(quirks)
    logger.info(f"🚀 Mock-сервер запущен на http://{host}:{port}/api (админ: {ADMIN_EMAIL})")
    web.run_app(backend.make_app(), host=host, port=port, print=None)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run()
