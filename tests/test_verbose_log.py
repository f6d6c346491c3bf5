from loguru import logger

from loadout_engine import enable_verbose_log


def test_verbose_sink_keeps_existing_sinks(capsys):
    logger.remove()
    messages = []
    logger.add(messages.append, level="INFO", format="{message}")

    enable_verbose_log()
    enable_verbose_log()
    logger.debug("slot decision")
    logger.info("run summary")

    err = capsys.readouterr().err
    assert err.count("slot decision") == 1
    assert "run summary" not in err
    assert [m.strip() for m in messages] == ["run summary"]

    logger.remove()


def test_verbose_sink_survives_a_reset_elsewhere(capsys):
    enable_verbose_log()
    logger.remove()

    enable_verbose_log()
    logger.debug("after reset")

    assert "after reset" in capsys.readouterr().err
    logger.remove()
