import threading


def test_late_submission_status_waits_for_kiosk_lock(kiosk):
    kiosk.last_result = {'result_id': 7, 'submission_status': 'pending'}

    kiosk._lock.acquire()
    worker = threading.Thread(target=kiosk._set_last_status, args=(7, 'sent'))
    worker.start()
    worker.join(timeout=0.2)
    assert worker.is_alive()
    assert kiosk.last_result['submission_status'] == 'pending'

    # A new game clears the result while the late status is still waiting
    kiosk.last_result = None
    kiosk._lock.release()
    worker.join(timeout=2)
    assert not worker.is_alive()
    assert kiosk.last_result is None


def test_submission_status_only_touches_matching_result(kiosk):
    kiosk.last_result = {'result_id': 8, 'submission_status': 'pending'}
    kiosk._set_last_status(7, 'sent')
    assert kiosk.last_result['submission_status'] == 'pending'
    kiosk._set_last_status(8, 'failed')
    assert kiosk.last_result['submission_status'] == 'failed'
