# address_verification/services/change_request_service.py
import logging
from typing import Any, Dict, List, Optional, Tuple

from beanie import PydanticObjectId
from pymongo.errors import DuplicateKeyError

from address_verification.models.change_request import ChangeRequest, ChangeStatus
from address_verification.models.person import Person, utcnow
from address_verification.services import background
from address_verification.services.address_resolver import AddressResolver
from address_verification.services.errors import (
    AlreadyProcessedError,
    InvalidError,
    NotFoundError,
)
from address_verification.services.person_service import PersonService
from address_verification.services.reference_code import (
    generate_reference_code,
    normalize_reference_code,
)

logger = logging.getLogger(__name__)

MANUAL_NEIGHBORHOOD_FLAG = "is_manual_neighborhood"


def flatten_address(data: Dict[str, Any]) -> Dict[str, Any]:
    """Lifts the fields of a nested `address` object to the top level."""
    flat = dict(data or {})
    address = flat.pop("address", None)
    if isinstance(address, dict):
        flat.update(address)
    return flat


def _has_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class ChangeRequestService:
    """
    Public submissions and their review.

    Every subject has at most one pending ChangeRequest: resubmitting while
    one is pending replaces its proposed data. Approval and rejection are
    one-way transitions out of `pending`.
    """

    def __init__(
        self,
        person_service: Optional[PersonService] = None,
        resolver: Optional[AddressResolver] = None,
    ):
        self.person_service = person_service or PersonService()
        self.resolver = resolver or AddressResolver()

    async def get_change(self, change_id: PydanticObjectId) -> Optional[ChangeRequest]:
        return await ChangeRequest.get(change_id)

    async def get_pending_for(self, subject_code: str) -> Optional[ChangeRequest]:
        return await ChangeRequest.find_one(
            {"subject_code": subject_code, "status": ChangeStatus.PENDING.value}
        )

    async def _save_proposal(
        self,
        subject_code: str,
        data: Dict[str, Any],
        person: Optional[Person] = None,
    ) -> bool:
        """
        Stores `data` as the subject's pending proposal. Returns True when an
        existing pending request was updated, False when one was created.
        """
        pending = await self.get_pending_for(subject_code)
        if pending:
            await pending.set({"proposed_data": data, "updated_at": utcnow()})
            return True

        change = ChangeRequest(
            subject_code=subject_code,
            person_id=person.id if person else None,
            prior_snapshot=person.snapshot() if person else None,
            proposed_data=data,
            is_new_entry=person is None,
        )
        try:
            await change.insert()
            return False
        except DuplicateKeyError:
            # A concurrent submission created the pending request first
            pending = await self.get_pending_for(subject_code)
            if pending is None:
                raise
            logger.info(f"Folding concurrent submission into pending change for {subject_code}.")
            await pending.set({"proposed_data": data, "updated_at": utcnow()})
            return True

    async def _fresh_code(self) -> str:
        while True:
            code = generate_reference_code()
            if await self.person_service.find_by_code(code):
                continue
            if await self.get_pending_for(code):
                continue
            return code

    async def submit(
        self, reference_code: Optional[str], data: Dict[str, Any]
    ) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise InvalidError("Gönderilen veri geçersiz")
        flat = flatten_address(data)
        if not _has_text(flat.get("first_name")) or not _has_text(flat.get("last_name")):
            raise InvalidError("İsim ve soyisim alanları zorunludur")

        person = await self.person_service.find_by_code(reference_code)
        if person:
            await self.person_service.record_event(person, "form_submissions")
            updated = await self._save_proposal(person.unique_code, data, person)
            message = (
                "Adres güncelleme isteğiniz güncellendi."
                if updated
                else "Adres güncelleme isteğiniz alındı. Onay sonrası güncellenecektir."
            )
            return {"message": message, "type": "update", "reference_code": None}

        if reference_code and reference_code.strip():
            code = normalize_reference_code(reference_code)
        else:
            code = await self._fresh_code()
        updated = await self._save_proposal(code, data)
        message = (
            "Kayıt talebiniz güncellendi. Onay sonrası sisteme eklenecektir."
            if updated
            else "Kayıt talebiniz alındı. Onay sonrası sisteme eklenecektir."
        )
        return {"message": message, "type": "new", "reference_code": code}

    async def lookup(self, reference_code: str) -> Dict[str, Any]:
        """
        What the public form shows for a code: the authoritative record with
        the subject's own pending proposal, if any, laid over it.
        """
        person = await self.person_service.find_by_code(reference_code)
        if not person:
            return {"exists": False, "data": None}

        await self.person_service.record_event(person, "link_visits")

        display = person.snapshot()
        pending = await self.get_pending_for(person.unique_code)
        if pending and pending.proposed_data:
            display.update(flatten_address(pending.proposed_data))
        return {"exists": True, "data": display}

    async def _claim(self, change_id: PydanticObjectId, new_status: ChangeStatus) -> ChangeRequest:
        """
        Moves a pending change to `new_status`. The status filter on the
        update makes a concurrent second decision fail instead of applying twice.
        """
        change = await self.get_change(change_id)
        if not change:
            raise NotFoundError("Değişiklik bulunamadı")
        if not change.is_pending:
            raise AlreadyProcessedError()

        result = await ChangeRequest.find_one(
            {"_id": change.id, "status": ChangeStatus.PENDING.value}
        ).update({"$set": {"status": new_status.value, "updated_at": utcnow()}})
        if not result or result.modified_count == 0:
            raise AlreadyProcessedError()
        change.status = new_status
        return change

    async def _release(self, change: ChangeRequest) -> None:
        """
        Returns a claimed change to pending. If the subject has meanwhile
        submitted a new pending request, the claimed one is rejected instead,
        since the newer proposal supersedes it.
        """
        try:
            await ChangeRequest.find_one({"_id": change.id}).update(
                {"$set": {"status": ChangeStatus.PENDING.value, "updated_at": utcnow()}}
            )
        except DuplicateKeyError as e:
            logger.error(
                f"Change {change.id} could not return to pending, a newer pending "
                f"request exists for {change.subject_code}: {e}. Marking it rejected."
            )
            await ChangeRequest.find_one({"_id": change.id}).update(
                {"$set": {"status": ChangeStatus.REJECTED.value, "updated_at": utcnow()}}
            )
            change.status = ChangeStatus.REJECTED
            return
        change.status = ChangeStatus.PENDING

    async def approve(
        self, change_id: PydanticObjectId, add_to_system: bool = False
    ) -> ChangeRequest:
        change = await self._claim(change_id, ChangeStatus.APPROVED)
        flat = flatten_address(change.proposed_data)

        try:
            await self._apply(change, flat)
        except Exception:
            logger.exception(f"Applying change {change.id} failed; returning it to pending.")
            await self._release(change)
            raise

        logger.info(f"Change {change.id} for {change.subject_code} approved.")

        if add_to_system and flat.get(MANUAL_NEIGHBORHOOD_FLAG):
            background.spawn(
                self._register_manual_neighborhood(change, flat),
                name=f"manual-neighborhood-{change.id}",
            )
        return change

    async def _apply(self, change: ChangeRequest, flat: Dict[str, Any]) -> Person:
        if change.is_new_entry:
            existing = await self.person_service.find_by_code(change.subject_code)
            if existing is None:
                return await self.person_service.create_person(
                    flat, unique_code=change.subject_code
                )
            # The code was registered after this request was submitted
            person = await self.person_service.update_person(existing.id, flat)
        else:
            person = await self.person_service.update_person(change.person_id, flat)
        if person is None:
            raise NotFoundError("Kişi bulunamadı")
        return person

    async def _register_manual_neighborhood(
        self, change: ChangeRequest, flat: Dict[str, Any]
    ) -> None:
        """Best-effort cache extension after an approval; never undoes the approval."""
        province = flat.get("province")
        district = flat.get("district")
        neighborhood = flat.get("neighborhood")
        if not (_has_text(province) and _has_text(district) and _has_text(neighborhood)):
            logger.warning(
                f"Change {change.id} flags a manual neighborhood but lacks "
                "province/district/neighborhood names; skipping."
            )
            return
        try:
            node = await self.resolver.add_manual_neighborhood(province, district, neighborhood)
        except NotFoundError as e:
            logger.warning(
                f"Manual neighborhood '{neighborhood}' from change {change.id} "
                f"was not added: {e.detail}"
            )
            return
        logger.info(f"Manual neighborhood '{node.name}' added as {node.id}.")

    async def reject(self, change_id: PydanticObjectId) -> ChangeRequest:
        change = await self._claim(change_id, ChangeStatus.REJECTED)
        logger.info(f"Change {change.id} for {change.subject_code} rejected.")
        return change

    async def list_changes(
        self, status: Optional[str] = "pending", skip: int = 0, limit: int = 20
    ) -> Tuple[List[ChangeRequest], int, Dict[PydanticObjectId, Person]]:
        """Newest first; `status` of None or "all" lists every change."""
        query: Dict[str, Any] = {}
        if status and status != "all":
            query["status"] = status
        changes = (
            await ChangeRequest.find(query)
            .sort("-created_at")
            .skip(skip)
            .limit(limit)
            .to_list()
        )
        total = await ChangeRequest.find(query).count()

        person_ids = list({c.person_id for c in changes if c.person_id})
        persons = {}
        if person_ids:
            for person in await Person.find({"_id": {"$in": person_ids}}).to_list():
                persons[person.id] = person
        return changes, total, persons

    async def pending_count(self) -> int:
        return await ChangeRequest.find({"status": ChangeStatus.PENDING.value}).count()
