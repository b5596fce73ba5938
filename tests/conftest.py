import json

from pathlib import Path

import pytest

from apptargets.config import APP_GROUPS_KEY, HostAppConfig
from apptargets.details.logger import Logger, reset_logger_state
from apptargets.generators.xcode.graph import ProjectGraph

HOST_PBXPROJ = """// !$*UTF8*$!
{
	archiveVersion = 1;
	classes = {
	};
	objectVersion = 56;
	objects = {

/* Begin PBXBuildFile section */
		13B07FBC1A68108700A75B9A /* AppDelegate.swift in Sources */ = {isa = PBXBuildFile; fileRef = 13B07FB01A68108700A75B9A /* AppDelegate.swift */; };
/* End PBXBuildFile section */

/* Begin PBXFileReference section */
		13B07F961A680F5B00A75B9A /* HostApp.app */ = {isa = PBXFileReference; explicitFileType = wrapper.application; includeInIndex = 0; path = HostApp.app; sourceTree = BUILT_PRODUCTS_DIR; };
		13B07FB01A68108700A75B9A /* AppDelegate.swift */ = {isa = PBXFileReference; fileEncoding = 4; lastKnownFileType = sourcecode.swift; name = AppDelegate.swift; path = HostApp/AppDelegate.swift; sourceTree = "<group>"; };
		13B07FB11A68108700A75B9A /* HostApp.entitlements */ = {isa = PBXFileReference; lastKnownFileType = text.plist.entitlements; name = HostApp.entitlements; path = HostApp/HostApp.entitlements; sourceTree = "<group>"; };
/* End PBXFileReference section */

/* Begin PBXFrameworksBuildPhase section */
		13B07F8C1A680F5B00A75B9A /* Frameworks */ = {
			isa = PBXFrameworksBuildPhase;
			buildActionMask = 2147483647;
			files = (
			);
			runOnlyForDeploymentPostprocessing = 0;
		};
/* End PBXFrameworksBuildPhase section */

/* Begin PBXGroup section */
		13B07FAE1A68108700A75B9A /* HostApp */ = {
			isa = PBXGroup;
			children = (
				13B07FB01A68108700A75B9A /* AppDelegate.swift */,
				13B07FB11A68108700A75B9A /* HostApp.entitlements */,
			);
			name = HostApp;
			sourceTree = "<group>";
		};
		83CBB9F61A601CBA00E9B192 = {
			isa = PBXGroup;
			children = (
				13B07FAE1A68108700A75B9A /* HostApp */,
				83CBBA001A601CBA00E9B192 /* Products */,
			);
			indentWidth = 2;
			sourceTree = "<group>";
			tabWidth = 2;
			usesTabs = 0;
		};
		83CBBA001A601CBA00E9B192 /* Products */ = {
			isa = PBXGroup;
			children = (
				13B07F961A680F5B00A75B9A /* HostApp.app */,
			);
			name = Products;
			sourceTree = "<group>";
		};
/* End PBXGroup section */

/* Begin PBXNativeTarget section */
		13B07F861A680F5B00A75B9A /* HostApp */ = {
			isa = PBXNativeTarget;
			buildConfigurationList = 13B07F931A680F5B00A75B9A /* Build configuration list for PBXNativeTarget "HostApp" */;
			buildPhases = (
				13B07F871A680F5B00A75B9A /* Sources */,
				13B07F8C1A680F5B00A75B9A /* Frameworks */,
				13B07F8E1A680F5B00A75B9A /* Resources */,
			);
			buildRules = (
			);
			dependencies = (
			);
			name = HostApp;
			productName = HostApp;
			productReference = 13B07F961A680F5B00A75B9A /* HostApp.app */;
			productType = "com.apple.product-type.application";
		};
/* End PBXNativeTarget section */

/* Begin PBXProject section */
		83CBB9F71A601CBA00E9B192 /* Project object */ = {
			isa = PBXProject;
			attributes = {
				LastUpgradeCheck = 1130;
			};
			buildConfigurationList = 83CBB9FA1A601CBA00E9B192 /* Build configuration list for PBXProject "HostApp" */;
			compatibilityVersion = "Xcode 12.0";
			developmentRegion = en;
			hasScannedForEncodings = 0;
			knownRegions = (
				en,
				Base,
			);
			mainGroup = 83CBB9F61A601CBA00E9B192;
			productRefGroup = 83CBBA001A601CBA00E9B192 /* Products */;
			projectDirPath = "";
			projectRoot = "";
			targets = (
				13B07F861A680F5B00A75B9A /* HostApp */,
			);
		};
/* End PBXProject section */

/* Begin PBXResourcesBuildPhase section */
		13B07F8E1A680F5B00A75B9A /* Resources */ = {
			isa = PBXResourcesBuildPhase;
			buildActionMask = 2147483647;
			files = (
			);
			runOnlyForDeploymentPostprocessing = 0;
		};
/* End PBXResourcesBuildPhase section */

/* Begin PBXSourcesBuildPhase section */
		13B07F871A680F5B00A75B9A /* Sources */ = {
			isa = PBXSourcesBuildPhase;
			buildActionMask = 2147483647;
			files = (
				13B07FBC1A68108700A75B9A /* AppDelegate.swift in Sources */,
			);
			runOnlyForDeploymentPostprocessing = 0;
		};
/* End PBXSourcesBuildPhase section */

/* Begin XCBuildConfiguration section */
		13B07F941A680F5B00A75B9A /* Debug */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				CODE_SIGN_ENTITLEMENTS = HostApp/HostApp.entitlements;
				PRODUCT_BUNDLE_IDENTIFIER = com.example.host;
				PRODUCT_NAME = HostApp;
				SWIFT_VERSION = 5.9;
			};
			name = Debug;
		};
		13B07F951A680F5B00A75B9A /* Release */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				CODE_SIGN_ENTITLEMENTS = HostApp/HostApp.entitlements;
				PRODUCT_BUNDLE_IDENTIFIER = com.example.host;
				PRODUCT_NAME = HostApp;
				SWIFT_VERSION = 5.9;
			};
			name = Release;
		};
		83CBBA201A601CBA00E9B192 /* Debug */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				IPHONEOS_DEPLOYMENT_TARGET = 15.1;
				SDKROOT = iphoneos;
			};
			name = Debug;
		};
		83CBBA211A601CBA00E9B192 /* Release */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				IPHONEOS_DEPLOYMENT_TARGET = 15.1;
				SDKROOT = iphoneos;
			};
			name = Release;
		};
/* End XCBuildConfiguration section */

/* Begin XCConfigurationList section */
		13B07F931A680F5B00A75B9A /* Build configuration list for PBXNativeTarget "HostApp" */ = {
			isa = XCConfigurationList;
			buildConfigurations = (
				13B07F941A680F5B00A75B9A /* Debug */,
				13B07F951A680F5B00A75B9A /* Release */,
			);
			defaultConfigurationIsVisible = 0;
			defaultConfigurationName = Release;
		};
		83CBB9FA1A601CBA00E9B192 /* Build configuration list for PBXProject "HostApp" */ = {
			isa = XCConfigurationList;
			buildConfigurations = (
				83CBBA201A601CBA00E9B192 /* Debug */,
				83CBBA211A601CBA00E9B192 /* Release */,
			);
			defaultConfigurationIsVisible = 0;
			defaultConfigurationName = Release;
		};
/* End XCConfigurationList section */
	};
	rootObject = 83CBB9F71A601CBA00E9B192 /* Project object */;
}
"""

HOST_ENTITLEMENTS = b"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict/>
</plist>
"""

BUILD_GRADLE = """apply plugin: "com.android.application"

android {
    namespace "com.example.template"
    defaultConfig {
        applicationId "com.example.host"
    }
}
"""

ANDROID_MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android">
  <uses-permission android:name="android.permission.INTERNET"/>
  <application android:name=".MainApplication" android:label="@string/app_name">
    <activity android:name=".MainActivity" android:exported="true"/>
  </application>
</manifest>
"""

PODFILE = """platform :ios, '15.1'

target 'HostApp' do
  use_expo_modules!

  post_install do |installer|
    react_native_post_install(installer)
  end
end
"""


@pytest.fixture(autouse=True)
def logger_state():
    reset_logger_state()
    yield
    reset_logger_state()


@pytest.fixture
def logger():
    return Logger()


@pytest.fixture
def host():
    return HostAppConfig(
        name="HostApp",
        ios={
            "bundleIdentifier": "com.example.host",
            "deploymentTarget": "15.1",
            "entitlements": {APP_GROUPS_KEY: ["group.com.example.host"]},
        },
        android={"package": "com.example.host"},
    )


@pytest.fixture
def graph():
    return ProjectGraph.loads(HOST_PBXPROJ)


def write_target(project_root: Path, directory: str, config: dict) -> Path:
    root = project_root.joinpath("targets", directory)
    root.mkdir(parents=True, exist_ok=True)
    root.joinpath("target.config.json").write_text(json.dumps(config))
    return root


@pytest.fixture
def project_root(tmp_path, host):
    xcodeproj = tmp_path.joinpath("ios", "HostApp.xcodeproj")
    xcodeproj.mkdir(parents=True)
    xcodeproj.joinpath("project.pbxproj").write_text(HOST_PBXPROJ)
    tmp_path.joinpath("ios", "HostApp").mkdir()
    tmp_path.joinpath("ios", "HostApp", "HostApp.entitlements").write_bytes(HOST_ENTITLEMENTS)
    gradle = tmp_path.joinpath("android", "app", "build.gradle")
    gradle.parent.mkdir(parents=True)
    gradle.write_text(BUILD_GRADLE)
    gradle.parent.joinpath("src", "main").mkdir(parents=True)
    gradle.parent.joinpath("src", "main", "AndroidManifest.xml").write_text(ANDROID_MANIFEST)
    tmp_path.joinpath("ios", "Podfile").write_text(PODFILE)
    app_json = {"expo": {"name": host.name, "ios": host.ios, "android": host.android}}
    tmp_path.joinpath("app.json").write_text(json.dumps(app_json))
    tmp_path.joinpath("targets").mkdir()
    return tmp_path
