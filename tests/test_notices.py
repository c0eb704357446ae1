from retranslate.notices import ERROR, SUCCESS, Notice, NoticeLog


def test_notice_log_keeps_order_and_echoes():
    echoed = []
    notices = NoticeLog(echo=echoed.append)

    notices.notify(Notice(SUCCESS, "Translation updated: Hello"))
    notices.notify(Notice(ERROR, "Translation failed: Unknown error"))

    assert [n.kind for n in notices.notices] == [SUCCESS, ERROR]
    assert echoed == notices.notices
    assert notices.of_kind(ERROR) == [Notice(ERROR, "Translation failed: Unknown error")]
