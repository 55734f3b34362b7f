import asyncio

import pytest

from core.compression.policy import PolicyKey
from core.config import PluginConfig
from core.path_manager import PathManager
from core.permission import ConfigPermissionRequester


def test_defaults():
    config = PluginConfig()
    assert config.default_policy is PolicyKey.LOSSY
    assert config.allow_gallery_save is True
    assert config.gallery_dir_name == "gallery"
    assert config.download_timeout == 30
    assert config.max_source_size == 20 * 1024 * 1024
    assert config.send_result_image is True


def test_default_policy_from_config():
    assert PluginConfig({"default_policy": "Efficient"}).default_policy is PolicyKey.EFFICIENT


def test_invalid_default_policy_falls_back_to_lossy():
    assert PluginConfig({"default_policy": "sepia"}).default_policy is PolicyKey.LOSSY


def test_data_dir_must_be_set():
    with pytest.raises(RuntimeError):
        PluginConfig().get_data_dir()


def test_path_manager_layout(tmp_path):
    config = PluginConfig({"gallery_dir_name": "album"})
    config.set_data_dir(tmp_path)
    paths = PathManager(config)

    user_dir = paths.get_user_dir("qq", "123", "456")

    assert user_dir == tmp_path / "qq" / "123" / "456"
    assert paths.get_work_dir(user_dir).is_dir()
    assert paths.get_gallery_dir(user_dir) == user_dir / "album"


@pytest.mark.parametrize("allowed", [True, False])
def test_permission_follows_config(allowed):
    requester = ConfigPermissionRequester(PluginConfig({"allow_gallery_save": allowed}))
    capability = asyncio.run(requester.request_gallery_write_permission())
    assert capability.granted is allowed
