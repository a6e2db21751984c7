import unittest

from fastapi.testclient import TestClient

from fiatshamir.keys import setup
from fiatshamir.protocol import FiatShamirProver
from fiatshamir.rng import DeterministicRandomSource
from fiatshamir import server
from fiatshamir.server import _SessionManager, app


class TestVerifierService(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)
        self.keys = setup(bits=32, rng=DeterministicRandomSource(31))
        self.prover = FiatShamirProver(self.keys.secret, self.keys.public)

    def _open(self, rounds: int = 4) -> str:
        response = self.client.post(
            "/sessions",
            json={"n": hex(self.keys.n), "y": hex(self.keys.y), "rounds": rounds},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["rounds"], rounds)
        return response.json()["session"]

    def _commit(self, session: str):
        commitment = self.prover.commit()
        response = self.client.post(f"/sessions/{session}/commit", json={"commitment": hex(commitment.t)})
        self.assertEqual(response.status_code, 200)
        return commitment, response.json()["challenge"]

    def test_honest_prover_accepted(self) -> None:
        session = self._open(rounds=4)
        for index in range(1, 5):
            commitment, challenge = self._commit(session)
            self.assertIn(challenge, (0, 1))
            s = self.prover.respond(commitment, challenge)
            body = self.client.post(f"/sessions/{session}/respond", json={"response": hex(s)}).json()
            self.assertTrue(body["accepted"])
            self.assertEqual(body["round"], index)
        self.assertTrue(body["completed"])
        self.assertTrue(body["success"])

    def test_bad_response_ends_session(self) -> None:
        session = self._open()
        commitment, challenge = self._commit(session)
        s = (self.prover.respond(commitment, challenge) + 1) % self.keys.n
        body = self.client.post(f"/sessions/{session}/respond", json={"response": hex(s)}).json()
        self.assertFalse(body["accepted"])
        self.assertTrue(body["completed"])
        self.assertFalse(body["success"])

        again = self.client.post(f"/sessions/{session}/commit", json={"commitment": "0x10"})
        self.assertEqual(again.status_code, 404)

    def test_in_progress_session_has_no_verdict(self) -> None:
        session = self._open(rounds=2)
        commitment, challenge = self._commit(session)
        s = self.prover.respond(commitment, challenge)
        body = self.client.post(f"/sessions/{session}/respond", json={"response": hex(s)}).json()
        self.assertFalse(body["completed"])
        self.assertIsNone(body["success"])

    def test_unknown_session(self) -> None:
        response = self.client.post("/sessions/missing/commit", json={"commitment": "0x10"})
        self.assertEqual(response.status_code, 404)

    def test_protocol_order_enforced(self) -> None:
        session = self._open()
        early = self.client.post(f"/sessions/{session}/respond", json={"response": "0x10"})
        self.assertEqual(early.status_code, 400)
        self._commit(session)
        twice = self.client.post(f"/sessions/{session}/commit", json={"commitment": "0x10"})
        self.assertEqual(twice.status_code, 400)

    def test_malformed_values(self) -> None:
        bad_key = self.client.post("/sessions", json={"n": "zz", "y": "0x1"})
        self.assertEqual(bad_key.status_code, 400)
        unreduced = self.client.post("/sessions", json={"n": "0x8f", "y": "0x8f"})
        self.assertEqual(unreduced.status_code, 400)
        no_rounds = self.client.post("/sessions", json={"n": "0x8f", "y": "0x19", "rounds": 0})
        self.assertEqual(no_rounds.status_code, 422)

        session = self._open()
        too_big = self.client.post(f"/sessions/{session}/commit", json={"commitment": hex(self.keys.n)})
        self.assertEqual(too_big.status_code, 400)
        not_hex = self.client.post(f"/sessions/{session}/commit", json={"commitment": "nope"})
        self.assertEqual(not_hex.status_code, 400)

    def test_zero_commitment_rejected(self) -> None:
        session = self._open(rounds=20)
        zero = self.client.post(f"/sessions/{session}/commit", json={"commitment": "0x0"})
        self.assertEqual(zero.status_code, 400)
        early = self.client.post(f"/sessions/{session}/respond", json={"response": "0x0"})
        self.assertEqual(early.status_code, 400)

    def test_commitment_sharing_a_factor_rejected(self) -> None:
        session = self._open()
        shared = self.client.post(f"/sessions/{session}/commit", json={"commitment": hex(self.keys.p)})
        self.assertEqual(shared.status_code, 400)

    def test_finished_sessions_are_released(self) -> None:
        before = len(server._sessions)
        for _ in range(5):
            session = self._open(rounds=1)
            commitment, challenge = self._commit(session)
            s = self.prover.respond(commitment, challenge)
            body = self.client.post(f"/sessions/{session}/respond", json={"response": hex(s)}).json()
            self.assertTrue(body["completed"])
        self.assertEqual(len(server._sessions), before)


class TestSessionManager(unittest.TestCase):
    def setUp(self) -> None:
        self.public = setup(bits=16, rng=DeterministicRandomSource(32)).public

    def test_idle_sessions_expire(self) -> None:
        manager = _SessionManager(ttl=0)
        session = manager.create(self.public, rounds=3)
        with self.assertRaises(KeyError):
            manager.get(session)
        self.assertEqual(len(manager), 0)

    def test_expired_sessions_purged_on_create(self) -> None:
        manager = _SessionManager(ttl=0)
        manager.create(self.public, rounds=3)
        manager.create(self.public, rounds=3)
        self.assertEqual(len(manager), 1)

    def test_live_session_kept(self) -> None:
        manager = _SessionManager(ttl=60)
        session = manager.create(self.public, rounds=3)
        self.assertEqual(manager.get(session).rounds, 3)
        manager.pop(session)
        self.assertEqual(len(manager), 0)


if __name__ == "__main__":
    unittest.main()
